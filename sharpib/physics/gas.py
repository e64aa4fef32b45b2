"""
Conservative <-> primitive conversion for a calorically perfect gas.

    conservative U = [rho, rho*u, rho*v, rho*w, rho*E]
    primitive   Uo = [rho, u, v, w, p, T]

    p   = (gamma - 1) * (rho*E - 0.5 * rho * |V|^2)
    T   = p / (rho * R)
    rho = p / (R * T)           (ideal gas, used for every reconstructed node)
"""

import numpy as np
from numba import njit

from ..constants import N_CONS, N_PRIM


@njit(cache=True)
def primitive_by_conservative(gamma: float, gas_r: float, U: np.ndarray) -> np.ndarray:
    Uo = np.empty(N_PRIM)
    rho = U[0]
    u = U[1] / rho
    v = U[2] / rho
    w = U[3] / rho
    p = (gamma - 1.0) * (U[4] - 0.5 * rho * (u * u + v * v + w * w))
    Uo[0] = rho
    Uo[1] = u
    Uo[2] = v
    Uo[3] = w
    Uo[4] = p
    Uo[5] = p / (rho * gas_r)
    return Uo


@njit(cache=True)
def conservative_by_primitive(gamma: float, Uo: np.ndarray) -> np.ndarray:
    U = np.empty(N_CONS)
    rho = Uo[0]
    U[0] = rho
    U[1] = rho * Uo[1]
    U[2] = rho * Uo[2]
    U[3] = rho * Uo[3]
    U[4] = Uo[4] / (gamma - 1.0) + 0.5 * rho * (Uo[1] * Uo[1] + Uo[2] * Uo[2] + Uo[3] * Uo[3])
    return U


@njit(cache=True)
def density_by_state(p: float, T: float, gas_r: float) -> float:
    """Ideal-gas density from pressure and temperature."""
    return p / (T * gas_r)


def primitive_field(gamma: float, gas_r: float, U: np.ndarray) -> np.ndarray:
    """
    Vectorised primitive variables of a whole state array.
    
    Parameters
    ----------
    U : ndarray, shape (..., 5)
        Conservative state.
        
    Returns
    -------
    Uo : ndarray, shape (..., 6)
    """
    rho = U[..., 0]
    vel = U[..., 1:4] / rho[..., None]
    p = (gamma - 1.0) * (U[..., 4] - 0.5 * rho * np.sum(vel * vel, axis=-1))
    Uo = np.empty(U.shape[:-1] + (N_PRIM,))
    Uo[..., 0] = rho
    Uo[..., 1:4] = vel
    Uo[..., 4] = p
    Uo[..., 5] = p / (rho * gas_r)
    return Uo
