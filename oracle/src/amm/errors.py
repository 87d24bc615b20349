"""Exceptions raised by the AMM math."""

X_OUT_OF_BOUNDS = "X_OUT_OF_BOUNDS"
Y_OUT_OF_BOUNDS = "Y_OUT_OF_BOUNDS"
PRODUCT_OUT_OF_BOUNDS = "PRODUCT_OUT_OF_BOUNDS"
INVALID_EXPONENT = "INVALID_EXPONENT"
OUT_OF_BOUNDS = "OUT_OF_BOUNDS"
ZERO_DIVISION = "ZERO_DIVISION"
SUB_OVERFLOW = "SUB_OVERFLOW"
MAX_IN_RATIO = "MAX_IN_RATIO"
STABLE_INVARIANT_DIDNT_CONVERGE = "STABLE_INVARIANT_DIDNT_CONVERGE"
STABLE_GET_BALANCE_DIDNT_CONVERGE = "STABLE_GET_BALANCE_DIDNT_CONVERGE"


class BalancerMathError(ArithmeticError):
    """Raised when pool math leaves its valid domain.

    The code mirrors the revert reason of the on-chain library.

    :ivar code: Error code such as ``"MAX_IN_RATIO"``.
    """

    def __init__(self, code: str):
        """Initialize the error.

        :param code: Error code.
        """
        self.code = code
        super().__init__(code)
