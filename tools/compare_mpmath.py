from __future__ import annotations

import argparse

import mpmath as mp
import numpy as np

import besseljax as bj
from besseljax.results import Scaling

_BESSEL = {
    "J": (bj.bessel_j, mp.besselj),
    "Y": (bj.bessel_y, mp.bessely),
    "I": (bj.bessel_i, mp.besseli),
    "K": (bj.bessel_k, mp.besselk),
    "H1": (bj.hankel_h1, mp.hankel1),
    "H2": (bj.hankel_h2, mp.hankel2),
}

_AIRY = {
    "Ai": (bj.airy_ai, mp.airyai, False),
    "Ai'": (bj.airy_ai, mp.airyai, True),
    "Bi": (bj.airy_bi, mp.airybi, False),
    "Bi'": (bj.airy_bi, mp.airybi, True),
}


def _sample_points(rng: np.random.Generator, n: int, rmax: float) -> np.ndarray:
    # Log-uniform radius so small and large arguments are both covered.
    r = np.exp(rng.uniform(np.log(1e-3), np.log(rmax), size=n))
    t = rng.uniform(-np.pi, np.pi, size=n)
    return r * np.exp(1j * t)


def _rel(got: complex, want: complex) -> float:
    if want == 0.0:
        return abs(got)
    return abs(got - want) / abs(want)


def _summary(name: str, errs: list[float], skipped: int) -> None:
    if not errs:
        print(f"{name:4s} no comparable points (skipped={skipped})")
        return
    arr = np.asarray(errs)
    print(f"{name:4s} n={arr.size:5d} median={np.median(arr):.3e} p99={np.quantile(arr, 0.99):.3e} max={arr.max():.3e} skipped={skipped}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Relative error of besseljax against mpmath on random points.")
    parser.add_argument("--samples", type=int, default=200)
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument("--dps", type=int, default=40)
    parser.add_argument("--rmax", type=float, default=80.0)
    parser.add_argument("--numax", type=float, default=40.0)
    parser.add_argument("--count", type=int, default=3, help="orders per Bessel call")
    parser.add_argument("--scaled", action="store_true")
    parser.add_argument("--families", type=str, default=",".join(list(_BESSEL) + list(_AIRY)))
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    zs = _sample_points(rng, args.samples, args.rmax)
    nus = rng.uniform(0.0, args.numax, size=args.samples)
    kode = Scaling.SCALED if args.scaled else Scaling.UNSCALED
    wanted = [f.strip() for f in args.families.split(",") if f.strip()]

    print(f"samples={args.samples} seed={args.seed} dps={args.dps} scaled={args.scaled}")
    for name in wanted:
        errs: list[float] = []
        skipped = 0
        if name in _BESSEL:
            ours, ref = _BESSEL[name]
            for z, nu in zip(zs, nus):
                res = ours(complex(z), float(nu), kode, args.count)
                if not res.ok:
                    skipped += 1
                    continue
                with mp.workdps(args.dps):
                    for k in range(args.count):
                        want = ref(nu + k, complex(z))
                        if args.scaled:
                            want *= mp.exp(complex(bj.connection.scale_log(bj.connection.Family[name], complex(z))))
                        want = complex(want)
                        if want == 0.0 or not np.isfinite(abs(want)):
                            skipped += 1
                            continue
                        errs.append(_rel(complex(res.values[k]), want))
        elif name in _AIRY:
            ours, ref, derivative = _AIRY[name]
            for z in zs:
                res = ours(complex(z), derivative, kode)
                if not res.ok:
                    skipped += 1
                    continue
                with mp.workdps(args.dps):
                    want = ref(complex(z), derivative=int(derivative))
                    if args.scaled:
                        zeta = complex(bj.airy.airy_zeta(complex(z)))
                        want *= mp.exp(zeta if name.startswith("Ai") else -abs(zeta.real))
                    want = complex(want)
                if want == 0.0 or not np.isfinite(abs(want)):
                    skipped += 1
                    continue
                errs.append(_rel(complex(res.value), want))
        else:
            parser.error(f"unknown family {name!r}")
        _summary(name, errs, skipped)


if __name__ == "__main__":
    main()
