# pydoeclim/constants.py

"""
Central repository for the fixed physical constants of the DOECLIM
energy balance / diffusion ocean model.

These are properties of the model, not run parameters: climate sensitivity,
ocean diffusivity and the time step live in DoeclimConfig.
"""

# --- Land / sea heat exchange ---
AK = 0.31  # slope coefficient for land-sea heat exchange
BK = 1.59  # intercept coefficient for land-sea heat exchange (W m^-2 K^-1)
BSI = 1.3  # marine air warming enhancement (marine air T = BSI * SST)
RLAM = 1.43  # climate sensitivity enhancement over land

# --- Heat capacities ---
CAL = 0.52  # land-troposphere heat capacity (W yr m^-2 K^-1)
CAS = 7.80  # ocean mixed layer-troposphere heat capacity (W yr m^-2 K^-1)
CSW = 0.13  # specific heat of 1 m^3 seawater (W yr m^-3 K^-1)

# --- Geometry ---
FLND = 0.29  # land fraction
FSO = 0.95  # ocean area fraction below 60 m
ZBOT = 4000.0  # depth of the interior ocean (m)
EARTH_AREA = 5100656e8  # Earth surface area (m^2)

# --- Forcing / units ---
Q2CO = 3.7  # radiative forcing for doubled CO2 (W m^-2)
KCON = 3155.8  # diffusivity conversion cm^2/s -> m^2/yr
SECS_PER_YEAR = 31556926.0
HEAT_UNIT = 1.0e22  # heat content is reported in 10^22 J
