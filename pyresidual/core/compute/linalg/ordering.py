"""
Column orderings for sparse QR.

SuiteSparseQR computes the permutation itself; this module maps the
ordering names accepted by PyResidual onto its ordering codes.

Orderings:
    natural:        no fill-reducing permutation (given column order)
    fill_reducing:  COLAMD on the pattern of X
"""

from typing import Literal

import sparseqr


Ordering = Literal['fill_reducing', 'natural']

ORDERINGS: tuple[str, ...] = ('fill_reducing', 'natural')

_SPQR_ORDERINGS = {
    'fill_reducing': sparseqr.lib.SPQR_ORDERING_COLAMD,
    'natural': sparseqr.lib.SPQR_ORDERING_NATURAL,
}


def spqr_ordering(ordering: Ordering) -> int:
    """
    SuiteSparseQR ordering code for an ordering name.

    Raises:
        ValueError: If ordering is unknown
    """
    try:
        return _SPQR_ORDERINGS[ordering]
    except KeyError:
        raise ValueError(
            f"Unknown ordering: {ordering!r}. Use one of {ORDERINGS}."
        ) from None
