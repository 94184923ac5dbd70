"""
Command-line front end for the discrete spectrum computation.

Reads samples from a CSV file with columns `re,im`, runs `nsev` and writes
the bound states and amplitudes to a CSV file.

Usage:
    fast-nft signal.csv --t0 -16 --t1 16 --dstype both \
        --output results/spectrum.csv --plot figures/spectrum.png
"""

import argparse
import csv
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from .config import DEFAULT_DISCRETIZATION, DEFAULT_NITER
from .discrete.amplitudes import DiscreteSpectrumType
from .discrete.filters import BoundStateFiltering
from .discrete.roots import BoundStateLocalization
from .errors import InvalidInputError, NFTError
from .nsev import NsevOptions, NsevResult, nsev
from .scattering.discretization import DISCRETIZATIONS


SPECTRUM_COLUMNS = ['re_lambda', 'im_lambda', 're_normconst', 'im_normconst',
                    're_residue', 'im_residue']


# =============================================================================
# CSV I/O
# =============================================================================

def load_signal_csv(csv_path: Path) -> np.ndarray:
    """
    Load complex samples from a CSV file with columns `re,im`.

    A missing `im` column is read as zero.

    Raises
    ------
    InvalidInputError
        If the `re` column is missing or a value is not a number.
    """
    values = []
    with open(csv_path, 'r') as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None or 're' not in reader.fieldnames:
            raise InvalidInputError(f"{csv_path}: expected a header with column 're'")
        for line, row in enumerate(reader, start=2):
            try:
                values.append(complex(float(row['re']), float(row.get('im') or 0.0)))
            except (TypeError, ValueError) as e:
                raise InvalidInputError(f"{csv_path}, line {line}: {e}") from e
    return np.array(values, dtype=complex)


def _fmt(x: complex, part: str) -> str:
    return repr(float(getattr(x, part)))


def write_spectrum_csv(output_path: Path, result: NsevResult) -> None:
    """Write bound states and amplitudes, one row per bound state."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(SPECTRUM_COLUMNS)
        for k, lam in enumerate(result.bound_states):
            row = [_fmt(lam, 'real'), _fmt(lam, 'imag')]
            for values in (result.normconsts, result.residues):
                if values is None:
                    row += ['', '']
                else:
                    row += [_fmt(values[k], 'real'), _fmt(values[k], 'imag')]
            writer.writerow(row)


def load_spectrum_csv(csv_path: Path) -> NsevResult:
    """Load a spectrum written by `write_spectrum_csv`."""
    lam: List[complex] = []
    normconsts: List[complex] = []
    residues: List[complex] = []
    with open(csv_path, 'r') as f:
        reader = csv.DictReader(f)
        for row in reader:
            lam.append(complex(float(row['re_lambda']), float(row['im_lambda'])))
            if row['re_normconst']:
                normconsts.append(complex(float(row['re_normconst']),
                                          float(row['im_normconst'])))
            if row['re_residue']:
                residues.append(complex(float(row['re_residue']),
                                        float(row['im_residue'])))

    K = len(lam)
    return NsevResult(
        bound_states=np.array(lam, dtype=complex),
        normconsts=np.array(normconsts, dtype=complex) if len(normconsts) == K else None,
        residues=np.array(residues, dtype=complex) if len(residues) == K else None,
        found=K,
    )


# =============================================================================
# Entry point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Discrete spectrum of the vanishing nonlinear Schroedinger equation"
    )
    parser.add_argument("signal", type=str,
                        help="CSV file with columns re,im")
    parser.add_argument("--t0", type=float, required=True,
                        help="Position of the first sample")
    parser.add_argument("--t1", type=float, required=True,
                        help="Position of the last sample")
    parser.add_argument("--kappa", type=int, default=1, choices=[1, -1],
                        help="+1 focusing, -1 defocusing (default: 1)")
    parser.add_argument(
        "--bsloc", type=str, default=BoundStateLocalization.SUBSAMPLE_AND_REFINE.value,
        choices=[m.value for m in BoundStateLocalization],
        help="Bound state localization (default: subsample_and_refine)"
    )
    parser.add_argument(
        "--bsfilt", type=str, default=BoundStateFiltering.FULL.value,
        choices=[m.value for m in BoundStateFiltering],
        help="Bound state filtering (default: full)"
    )
    parser.add_argument("--niter", type=int, default=DEFAULT_NITER,
                        help=f"Newton iterations (default: {DEFAULT_NITER})")
    parser.add_argument(
        "--discretization", type=str, default=DEFAULT_DISCRETIZATION,
        choices=sorted(DISCRETIZATIONS),
        help=f"Fast scattering discretization (default: {DEFAULT_DISCRETIZATION})"
    )
    parser.add_argument(
        "--dstype", type=str, default=DiscreteSpectrumType.NORMING_CONSTANTS.value,
        choices=[m.value for m in DiscreteSpectrumType],
        help="Amplitudes to compute (default: norming_constants)"
    )
    parser.add_argument("--guesses", type=str, default=None,
                        help="CSV file with columns re,im of initial guesses (newton)")
    parser.add_argument("--capacity", type=int, default=None,
                        help="Maximum number of bound states returned")
    parser.add_argument("--output", type=str, default=None,
                        help="Output CSV path (default: print to stdout)")
    parser.add_argument("--plot", type=str, default=None,
                        help="Save a plot of the spectrum to this path")
    parser.add_argument("--quiet", action="store_true",
                        help="Suppress warnings")
    parser.add_argument("--verbose", action="store_true",
                        help="Print progress")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    args = build_parser().parse_args(argv)

    signal_path = Path(args.signal)
    if not signal_path.exists():
        print(f"ERROR: Signal file not found: {signal_path}", file=sys.stderr)
        return 1

    try:
        q = load_signal_csv(signal_path)
        guesses = load_signal_csv(Path(args.guesses)) if args.guesses else None
    except (NFTError, OSError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    try:
        options = NsevOptions(
            bound_state_filtering=args.bsfilt,
            bound_state_localization=args.bsloc,
            niter=args.niter,
            discspec_type=args.dstype,
            discretization=args.discretization,
            quiet=args.quiet,
            verbose=args.verbose,
        )
        result = nsev(q, (args.t0, args.t1), args.kappa,
                      capacity=args.capacity, initial_guesses=guesses,
                      options=options)
    except NFTError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    if args.verbose:
        for msg in result.diagnostics:
            print(f"diagnostic: {msg}")

    if args.output is not None:
        write_spectrum_csv(Path(args.output), result)
        print(f"Saved: {args.output}")
    else:
        for k, lam in enumerate(result.bound_states):
            line = f"{k:3d}  {lam.real: .12e} {lam.imag:+.12e}j"
            if result.normconsts is not None:
                b = result.normconsts[k]
                line += f"  b={b.real: .6e}{b.imag:+.6e}j"
            if result.residues is not None:
                r = result.residues[k]
                line += f"  res={r.real: .6e}{r.imag:+.6e}j"
            print(line)
        print(f"K = {result.K}")

    if args.plot is not None:
        from .plot.spectrum import plot_discrete_spectrum
        plot_discrete_spectrum(result, output=Path(args.plot))

    return 0


if __name__ == "__main__":
    sys.exit(main())
