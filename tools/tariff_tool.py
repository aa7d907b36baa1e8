import re

# Average residential price per kWh by state (R$, taxes included).
# Based on ANEEL / free-market estimates for 2024/2025.
BRAZIL_TARIFFS = {
    "AC": 0.98,
    "AL": 0.89,
    "AP": 0.85,
    "AM": 0.95,
    "BA": 0.92,
    "CE": 0.90,
    "DF": 0.83,
    "ES": 0.88,
    "GO": 0.86,
    "MA": 0.94,
    "MT": 0.91,
    "MS": 0.93,
    "MG": 0.95,  # CEMIG
    "PA": 0.99,  # Equatorial Pará
    "PB": 0.87,
    "PR": 0.84,  # Copel
    "PE": 0.91,
    "PI": 0.96,
    "RJ": 1.15,  # Enel/Light
    "RN": 0.88,
    "RS": 0.85,
    "RO": 0.89,
    "RR": 0.90,
    "SC": 0.78,  # Celesc
    "SP": 0.92,  # Enel/CPFL average
    "SE": 0.88,
    "TO": 0.93,
}
NATIONAL_AVERAGE_TARIFF = 0.90

_STATE_CODE_RE = re.compile(r"\b(" + "|".join(BRAZIL_TARIFFS) + r")\b")


def find_state_code(address: str):
    """Returns the first whole-word Brazilian state code in the address, or None."""
    match = _STATE_CODE_RE.search((address or "").upper())
    return match.group(1) if match else None


def lookup_tariff(address: str) -> float:
    """Price per kWh for the state named in a free-text address.

    Falls back to the national average when no state code is found.
    """
    state = find_state_code(address)
    if state is None:
        return NATIONAL_AVERAGE_TARIFF
    return BRAZIL_TARIFFS[state]
