"""Base contract enforcement utilities.

The require() function is the single enforcement mechanism for all contracts.
"""

from typing import Any, Optional, Type

from pdfclust.contracts.failure import ContractViolation


def require(
    condition: bool,
    message: str,
    error: Type[ContractViolation] = ContractViolation,
    stage: Optional[str] = None,
    key: Any = None,
) -> None:
    """Enforce a pipeline contract.

    This is called at stage boundaries to verify the data satisfies the
    guaranteed invariants. It is fail-fast: no recovery, no fallback.

    Parameters
    ----------
    condition : bool
        The invariant that must be true.

    message : str
        Error message explaining the contract violation. The stage and key
        are prefixed automatically when given.

    error : type, optional
        ContractViolation subclass to raise (default ContractViolation).

    stage : str, optional
        Name of the stage enforcing the contract.

    key : any, optional
        Grouping key (day of year, location) involved in the violation.

    Raises
    ------
    ContractViolation
        If condition is False.

    Examples
    --------
    >>> require(prec.ndim == 3, "prec must be 3-D", InvalidGridShape, stage="temporal")
    >>> require(count > 0, "no members", EmptyGroup, stage="cohort", key=day)
    """
    if not condition:
        prefix = ""
        if stage is not None:
            prefix = f"[{stage}] "
        if key is not None:
            prefix = f"{prefix}(key={key!r}) "
        raise error(f"{prefix}{message}", stage=stage, key=key)
