"""
===========================================================
sir.py
Author: Veronica Scerra
Last Updated: 2026-03-22
===========================================================

Description:
    Discrete-time SIR (Susceptible-Infectious-Recovered) simulator
    integrated with an explicit Euler scheme. Used to produce
    synthetic cumulative-count series for the growth-curve fits.

    Defines:
        - sir_rhs(): Computes the ODE right-hand side.
        - euler_step(): One explicit Euler step.
        - sir_euler(): Integrates the SIR system over a time grid.
        - SIRModel: Class wrapper with simulation and summary stats.

Example Usage:
    from epigrowth.sir import SIRModel
    model = SIRModel(N=10000, beta=0.3, gamma=0.1)
    df = model.simulate(n_days=120, I0=10)

Notes:
    - Incidence on day k is S[k-1] - S[k]; cumulative cases count
      the initially infectious too.
-----------------------------------------------------------
License: MIT
===========================================================
"""
import numpy as np
import pandas as pd
from typing import Dict

from .errors import DomainParameterError


def sir_rhs(S, I, R, beta, gamma, N):
    """Right-hand side of the SIR equations"""
    dS = -beta * S * I / N
    dI = beta * S * I / N - gamma * I
    dR = gamma * I
    return dS, dI, dR


def euler_step(S, I, R, h, beta, gamma, N):
    """single explicit Euler step; new infections never exceed S"""
    dS, _, dR = sir_rhs(S, I, R, beta, gamma, N)
    new_infections = min(-h * dS, S)
    recoveries = h * dR
    return S - new_infections, I + new_infections - recoveries, R + recoveries


def sir_euler(n_days: int, N: float, beta: float, gamma: float, I0: float,
              R0: float = 0.0, h: float = 1.0) -> Dict[str, np.ndarray]:
    """Integrate SIR with explicit Euler on t = 0, h, ..., n_days"""
    t = np.arange(0.0, n_days + h / 2, h)
    S, I, R = np.zeros_like(t), np.zeros_like(t), np.zeros_like(t)
    S[0], I[0], R[0] = N - I0 - R0, I0, R0

    incidence = np.zeros_like(t)
    for k in range(1, len(t)):
        S[k], I[k], R[k] = euler_step(S[k-1], I[k-1], R[k-1], h, beta, gamma, N)
        incidence[k] = S[k-1] - S[k]

    cumulative = I0 + np.cumsum(incidence)
    return {"t": t, "S": S, "I": I, "R": R, "incidence": incidence, "cumulative": cumulative}


class SIRModel:
    def __init__(self, N, beta, gamma):
        self.N, self.beta, self.gamma = float(N), float(beta), float(gamma)
        if self.N <= 0:
            raise DomainParameterError("population N must be positive")
        if self.beta < 0:
            raise DomainParameterError("transmission rate beta must be non-negative")
        if self.gamma <= 0:
            raise DomainParameterError("recovery rate gamma must be positive")

    @property
    def R0(self):
        return self.beta / self.gamma

    def simulate(self, n_days, I0, R0_init=0.0, h=1.0, start_date=None) -> pd.DataFrame:
        if not 0 <= I0 <= self.N - R0_init:
            raise DomainParameterError("I0 must lie in [0, N - R0_init]")
        out = sir_euler(n_days, self.N, self.beta, self.gamma, I0, R0_init, h)
        df = pd.DataFrame(out)
        if start_date is not None:
            df["date"] = pd.Timestamp(start_date) + pd.to_timedelta(df["t"], unit="D")
        return df

    @staticmethod
    def summary(outputs: pd.DataFrame):
        t, I, R = outputs["t"].to_numpy(), outputs["I"].to_numpy(), outputs["R"].to_numpy()
        peak_idx = int(np.argmax(I))
        N = outputs["S"].iloc[0] + I[0] + R[0]
        return {
            "peak_day": float(t[peak_idx]),
            "peak_infected": float(I[peak_idx]),
            "peak_prevalence": float(I[peak_idx]/N),
            "final_size": float(R[-1]/N)
        }
