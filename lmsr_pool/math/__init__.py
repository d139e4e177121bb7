"""Mathematical utilities for the LMSR pool kernel.

This package provides the numeric safety layer:
- Fp: signed 18-decimal fixed-point arithmetic
- safe_exp / safe_ln: bounded transcendental functions
"""

from lmsr_pool.math.fixed_point import Fp, require_positive, safe_exp, safe_ln

__all__ = ["Fp", "require_positive", "safe_exp", "safe_ln"]
