"""System parameters for the credential scheme, per key length."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class BaseParameters:
    """Base system parameters, all bit lengths."""

    le_prime: int
    lh: int
    lm: int
    ln: int
    lstatzk: int


@dataclass(frozen=True)
class SystemParameters:
    """Base parameters together with the parameters derived from them."""

    le_prime: int
    lh: int
    lm: int
    ln: int
    lstatzk: int
    le: int
    le_commit: int
    lm_commit: int
    l_ra: int
    ls_commit: int
    lv: int
    lv_commit: int
    lv_prime: int
    lv_prime_commit: int

    @classmethod
    def from_base(cls, base: BaseParameters) -> "SystemParameters":
        """Compute the derived parameters from ``base``."""
        lv = base.ln + 2 * base.lstatzk + base.lh + base.lm + 4
        return cls(
            le_prime=base.le_prime,
            lh=base.lh,
            lm=base.lm,
            ln=base.ln,
            lstatzk=base.lstatzk,
            le=base.lstatzk + base.lh + base.lm + 5,
            le_commit=base.le_prime + base.lstatzk + base.lh,
            lm_commit=base.lm + base.lstatzk + base.lh,
            l_ra=base.ln + base.lstatzk,
            ls_commit=base.lm + base.lstatzk + base.lh + 1,
            lv=lv,
            lv_commit=lv + base.lstatzk + base.lh,
            lv_prime=base.ln + base.lstatzk,
            lv_prime_commit=base.ln + 2 * base.lstatzk + base.lh,
        )


DEFAULT_BASE_PARAMETERS: Dict[int, BaseParameters] = {
    1024: BaseParameters(le_prime=120, lh=256, lm=256, ln=1024, lstatzk=80),
    2048: BaseParameters(le_prime=120, lh=256, lm=256, ln=2048, lstatzk=128),
    4096: BaseParameters(le_prime=120, lh=256, lm=512, ln=4096, lstatzk=128),
}

DEFAULT_SYSTEM_PARAMETERS: Dict[int, SystemParameters] = {
    length: SystemParameters.from_base(base)
    for length, base in DEFAULT_BASE_PARAMETERS.items()
}

DEFAULT_KEY_LENGTHS: List[int] = sorted(DEFAULT_SYSTEM_PARAMETERS)