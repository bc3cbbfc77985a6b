"""
===========================================================
plotting.py
Author: Veronica Scerra
Last Updated: 2026-03-30
===========================================================
Diagnostic figures for fitted growth curves.

    - plot_fit(): observed vs fitted cumulative counts with the
      key moments marked
    - plot_decomposition(): the two components of a double-wave fit
    - plot_reproduction(): R_t mean with a 95% normal band
"""
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from typing import Optional
from matplotlib.axes import Axes

from ..key_moments import KeyMoments
from ..models import ModelKind, get_model
from ..params import Theta

_MOMENT_STYLE = {"acceleration": "g", "peak": "r", "deceleration": "b"}


def plot_fit(fitted: pd.DataFrame,
             moments: Optional[KeyMoments] = None,
             ax: Optional[Axes] = None,
             show: bool = True,
             title: Optional[str] = None) -> Axes:
    """
    Plot observed and fitted cumulative counts.

    Parameters
    ----------
    fitted : pd.DataFrame
        Output of tables.fitted_values (columns t, observed, fitted, category)
    moments : KeyMoments, optional
        Observed moments are drawn as vertical lines
    ax : matplotlib.axes.Axes, optional
        Axes to plot on. If None, creates new figure
    show : bool
        Whether to display the plot immediately
    title : str, optional
        Figure title

    Returns
    -------
    ax : matplotlib.axes.Axes
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 6))

    for category, marker in (("observed", "o"), ("out-of-sample", "x")):
        sub = fitted[fitted["category"] == category]
        ax.plot(sub["t"], sub["observed"], marker, color="k", markersize=3,
                linestyle="none", label=category.capitalize())
    ax.plot(fitted["t"], fitted["fitted"], "-", color="tab:orange", linewidth=2, label="Fitted")

    if moments is not None:
        for m in moments.moments:
            if m.observed:
                ax.axvline(m.time, color=_MOMENT_STYLE[m.name], linestyle="--", alpha=0.6)

    ax.set_xlabel('Day', fontsize=12)
    ax.set_ylabel('Cumulative cases', fontsize=12)
    if title:
        ax.set_title(title, fontsize=14)
    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.3)

    if show:
        plt.tight_layout()
        plt.show()
    return ax


def plot_decomposition(kind, theta: Theta, t: np.ndarray,
                       ax: Optional[Axes] = None, show: bool = True) -> Axes:
    """Stacked first/second-wave components of a double-wave fit"""
    model = get_model(ModelKind(kind))
    first, second = model.components(theta, t)
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 6))
    ax.fill_between(t, 0, first, alpha=0.4, label="Wave 1")
    ax.fill_between(t, first, first + second, alpha=0.4, label="Wave 2")
    ax.plot(t, model.curve(theta, t), "k-", linewidth=1.5, label=model.name)
    ax.set_xlabel('Day', fontsize=12)
    ax.set_ylabel('Cumulative cases', fontsize=12)
    ax.legend(fontsize=11)
    ax.grid(True, alpha=0.3)
    if show:
        plt.tight_layout()
        plt.show()
    return ax


def plot_reproduction(reproduction: pd.DataFrame, ax: Optional[Axes] = None,
                      show: bool = True) -> Axes:
    """R_t mean +/- 1.96 sd from tables.reproduction_table"""
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 4))
    lo = reproduction["mean"] - 1.96 * reproduction["std"]
    hi = reproduction["mean"] + 1.96 * reproduction["std"]
    ax.fill_between(reproduction["t"], lo, hi, alpha=0.3)
    ax.plot(reproduction["t"], reproduction["mean"], "-", linewidth=2, label="$R_t$")
    ax.axhline(1.0, color="k", linestyle=":", linewidth=1)
    ax.set_xlabel('Day', fontsize=12)
    ax.set_ylabel('$R_t$', fontsize=12)
    ax.grid(True, alpha=0.3)
    if show:
        plt.tight_layout()
        plt.show()
    return ax
