import logging as _logging

from . import machine
from . import limits
from . import results
from . import checks
from . import scaling
from . import series
from . import asymptotic
from . import recurrence
from . import regions
from . import connection
from . import airy
from . import api

from .api import (
    Ai,
    Ai_scaled,
    Aip,
    Bi,
    Bi_scaled,
    Bip,
    H1,
    H1_scaled,
    H2,
    H2_scaled,
    I,
    I_scaled,
    J,
    J_scaled,
    K,
    K_scaled,
    Y,
    Y_scaled,
    airy_ai,
    airy_bi,
    bessel_i,
    bessel_j,
    bessel_k,
    bessel_y,
    hankel_h1,
    hankel_h2,
)
from .results import (
    AiryResult,
    BesselError,
    BesselOverflowError,
    BesselResult,
    ComputationError,
    InvalidParameterError,
    Scaling,
    Status,
)

_logger = _logging.getLogger("besseljax")
if not _logger.handlers:
    _handler = _logging.StreamHandler()
    _handler.setFormatter(_logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
    _logger.addHandler(_handler)
    _logger.setLevel(_logging.WARNING)

__all__ = [
    "machine",
    "limits",
    "results",
    "checks",
    "scaling",
    "series",
    "asymptotic",
    "recurrence",
    "regions",
    "connection",
    "airy",
    "api",
    "bessel_j",
    "bessel_y",
    "bessel_i",
    "bessel_k",
    "hankel_h1",
    "hankel_h2",
    "airy_ai",
    "airy_bi",
    "J",
    "Y",
    "I",
    "K",
    "H1",
    "H2",
    "J_scaled",
    "Y_scaled",
    "I_scaled",
    "K_scaled",
    "H1_scaled",
    "H2_scaled",
    "Ai",
    "Bi",
    "Aip",
    "Bip",
    "Ai_scaled",
    "Bi_scaled",
    "Scaling",
    "Status",
    "BesselResult",
    "AiryResult",
    "BesselError",
    "InvalidParameterError",
    "BesselOverflowError",
    "ComputationError",
]
