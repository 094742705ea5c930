import os

import mpmath as mp
import numpy as np
import pytest

import besseljax as bj
from besseljax.results import Scaling

from tests._test_checks import _check, _rel_err

pytestmark = pytest.mark.parity
if os.getenv("BESSELJAX_RUN_PARITY", "0") != "1":
    pytest.skip("Parity tests disabled. Set BESSELJAX_RUN_PARITY=1 to enable.", allow_module_level=True)

_FAMILIES = {
    "J": (bj.bessel_j, mp.besselj),
    "Y": (bj.bessel_y, mp.bessely),
    "I": (bj.bessel_i, mp.besseli),
    "K": (bj.bessel_k, mp.besselk),
    "H1": (bj.hankel_h1, mp.hankel1),
    "H2": (bj.hankel_h2, mp.hankel2),
}

_RADII = (0.05, 0.9, 3.0, 11.0, 27.0, 60.0)
_ANGLES = np.linspace(-np.pi + 0.05, np.pi, 9)
_ORDERS = (0.0, 0.5, 1.75, 13.2, 90.0)


def _grid():
    for r in _RADII:
        for t in _ANGLES:
            yield complex(r * np.cos(t), r * np.sin(t))


@pytest.mark.parametrize("name", sorted(_FAMILIES))
@pytest.mark.parametrize("nu", _ORDERS)
def test_sequence_parity(name, nu) -> None:
    ours, ref = _FAMILIES[name]
    worst = 0.0
    where = None
    for z in _grid():
        res = ours(z, nu, Scaling.UNSCALED, 3)
        if not res.ok:
            continue
        with mp.workdps(40):
            want = [complex(ref(nu + k, z)) for k in range(3)]
        usable = [k for k, w in enumerate(want) if w != 0.0 and np.isfinite(abs(w)) and abs(w) > 1e-290]
        if not usable:
            continue
        err = _rel_err(np.asarray(res.values)[usable], np.asarray(want)[usable])
        if err > worst:
            worst, where = err, z
    _check(worst <= 1e-9, f"{name} nu={nu}: worst relative error {worst:.3e} at z={where}")


@pytest.mark.parametrize("kind", ["ai", "bi"])
@pytest.mark.parametrize("derivative", [False, True])
def test_airy_parity(kind, derivative) -> None:
    ours = bj.airy_ai if kind == "ai" else bj.airy_bi
    ref = mp.airyai if kind == "ai" else mp.airybi
    worst = 0.0
    where = None
    for z in _grid():
        res = ours(z, derivative)
        if not res.ok:
            continue
        with mp.workdps(40):
            want = complex(ref(z, derivative=int(derivative)))
        if want == 0.0 or abs(want) < 1e-290:
            continue
        err = _rel_err(res.value, want)
        if err > worst:
            worst, where = err, z
    _check(worst <= 1e-9, f"{kind} derivative={derivative}: worst relative error {worst:.3e} at z={where}")
