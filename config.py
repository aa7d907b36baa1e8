import os
from dotenv import load_dotenv

load_dotenv()

# --- Google APIs ---
GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY", "")
GOOGLE_SOLAR_KEY = os.getenv("GOOGLE_SOLAR_KEY", GOOGLE_API_KEY)
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

GEOCODING_URL = "https://maps.googleapis.com/maps/api/geocode/json"
SOLAR_INSIGHTS_URL = "https://solar.googleapis.com/v1/buildingInsights:findClosest"
STATIC_MAP_URL = "https://maps.googleapis.com/maps/api/staticmap"

# --- Local proxy (empty string disables the proxy tier) ---
PROXY_BASE_URL = os.getenv("PROXY_BASE_URL", "http://localhost:3001/api")
HTTP_TIMEOUT_SECONDS = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

# --- Server ---
PORT = int(os.getenv("PORT", "3001"))
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- Marketplace ---
INSTALLER_STARTING_CREDITS = float(os.getenv("INSTALLER_STARTING_CREDITS", "500"))
LEAD_PRICE = float(os.getenv("LEAD_PRICE", "50"))


def validate_config():
    """Returns a list of human readable configuration problems."""
    issues = []

    if not GOOGLE_API_KEY:
        issues.append("GOOGLE_API_KEY missing")

    if HTTP_TIMEOUT_SECONDS <= 0:
        issues.append(f"HTTP_TIMEOUT_SECONDS={HTTP_TIMEOUT_SECONDS} must be positive")

    if LEAD_PRICE <= 0:
        issues.append(f"LEAD_PRICE={LEAD_PRICE} must be positive")

    if INSTALLER_STARTING_CREDITS < 0:
        issues.append(f"INSTALLER_STARTING_CREDITS={INSTALLER_STARTING_CREDITS} cannot be negative")

    return issues


if __name__ == "__main__":
    problems = validate_config()
    if problems:
        print("Configuration problems detected:")
        for problem in problems:
            print(f"   - {problem}")
    else:
        print("Configuration OK")
