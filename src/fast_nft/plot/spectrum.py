"""
Plot of a computed discrete spectrum.

Left panel: bound states in the complex plane, optionally against a set of
reference values. Right panel: magnitudes of the norming constants and/or
residues.

Usage:
    python -m fast_nft.plot.spectrum \
        --data results/spectrum.csv \
        --output figures/spectrum.png
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np

from ..nsev import NsevResult


def plot_discrete_spectrum(
    result: NsevResult,
    reference=None,
    output: Optional[Path] = None,
    dpi: int = 300,
    show: bool = False,
) -> plt.Figure:
    """
    Plot bound states and amplitude magnitudes.

    Parameters
    ----------
    result : NsevResult
        Output of `nsev`.
    reference : array_like, optional
        Exact bound states drawn as open circles.
    output : Path, optional
        Save figure to this path. Supports .png and .pdf.
    dpi : int
        Resolution for PNG output.
    show : bool
        Display plot interactively.

    Returns
    -------
    matplotlib.figure.Figure
    """
    lam = np.asarray(result.bound_states)
    fig, (ax_plane, ax_amp) = plt.subplots(1, 2, figsize=(11, 5))

    ax_plane.plot(lam.real, lam.imag, "bx", markersize=8, label="computed")
    if reference is not None:
        ref = np.asarray(reference)
        ax_plane.plot(ref.real, ref.imag, "ro", markerfacecolor="none",
                      markersize=10, label="reference")
    ax_plane.axhline(0.0, color="gray", linewidth=0.8)
    ax_plane.set_xlabel(r"Re $\lambda$", fontsize=14)
    ax_plane.set_ylabel(r"Im $\lambda$", fontsize=14)
    ax_plane.legend()

    k = np.arange(result.K)
    if result.normconsts is not None:
        ax_amp.semilogy(k, np.abs(result.normconsts), "bs", label=r"$|b_k|$")
    if result.residues is not None:
        ax_amp.semilogy(k, np.abs(result.residues), "g^", label=r"$|b_k / a'(\lambda_k)|$")
    ax_amp.set_xlabel("bound state index", fontsize=14)
    if result.K > 0:
        ax_amp.legend()

    fig.tight_layout()

    if output is not None:
        output = Path(output)
        output.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(output, dpi=dpi, bbox_inches="tight")
        print(f"Saved: {output}")

    if show:
        plt.show()

    return fig


def main():
    """Command-line entry point for spectrum plotting."""
    from ..cli import load_spectrum_csv

    parser = argparse.ArgumentParser(
        description="Plot a discrete spectrum written by fast-nft --output"
    )
    parser.add_argument("--data", type=str, required=True,
                        help="Spectrum CSV file")
    parser.add_argument("--output", type=str, default="spectrum.png",
                        help="Output file path (.png or .pdf)")
    parser.add_argument("--dpi", type=int, default=300,
                        help="Resolution for PNG output (default: 300)")
    parser.add_argument("--show", action="store_true",
                        help="Display plot interactively")

    args = parser.parse_args()

    data_path = Path(args.data)
    if not data_path.exists():
        print(f"ERROR: Data file not found: {data_path}", file=sys.stderr)
        sys.exit(1)

    result = load_spectrum_csv(data_path)
    plot_discrete_spectrum(result, output=Path(args.output),
                           dpi=args.dpi, show=args.show)


if __name__ == "__main__":
    main()
