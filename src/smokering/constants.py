"""Physical constants for air — single source of truth for default parameters.

Universal values sourced from ``scipy.constants`` (CODATA 2018).
Import from here instead of defining local constants.
"""

import scipy.constants as _sc

# Universal
R_molar = _sc.R               # Molar gas constant [J/(mol*K)]

# Dry air
M_air = 28.9647e-3            # Molar mass [kg/mol]
R_air = R_molar / M_air       # Specific gas constant [J/(kg*K)]
gamma_air = 1.4               # Ratio of specific heats
rho_air = 1.293               # Density at 0 C, 1 atm [kg/m^3]
p_air = 1.013e5               # Reference pressure [Pa]
mu_air = 1.8e-5               # Dynamic viscosity [Pa*s]
kappa_air = 0.0257            # Thermal diffusion coefficient [W/(m*K)]
