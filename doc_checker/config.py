# doc_checker/config.py
import os
from dotenv import load_dotenv

load_dotenv()

# -----------------------------------------------------------------------------
# Service
# -----------------------------------------------------------------------------
SITE_URL = os.getenv("SITE_URL", "http://localhost:5173")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# -----------------------------------------------------------------------------
# Uploads
# -----------------------------------------------------------------------------
MAX_FILES = int(os.getenv("MAX_FILES", "3"))
ALLOWED_EXTENSIONS = (".txt", ".pdf", ".doc", ".docx", ".md")

# -----------------------------------------------------------------------------
# Billing (display only, nothing is charged)
# -----------------------------------------------------------------------------
DOCUMENT_COST = float(os.getenv("DOCUMENT_COST", "2.99"))
REPORT_COST = float(os.getenv("REPORT_COST", "4.99"))

# -----------------------------------------------------------------------------
# Pacing (seconds)
# -----------------------------------------------------------------------------
ANALYSIS_DELAY_SECONDS = float(os.getenv("ANALYSIS_DELAY_SECONDS", "2.0"))
MONITOR_CHECK_DELAY_SECONDS = float(os.getenv("MONITOR_CHECK_DELAY_SECONDS", "2.0"))
MONITOR_PAUSE_SECONDS = float(os.getenv("MONITOR_PAUSE_SECONDS", "1.0"))
MONITOR_AUTO_INTERVAL = float(os.getenv("MONITOR_AUTO_INTERVAL", "10"))  # 0 disables

# simulated | http
MONITOR_MODE = os.getenv("MONITOR_MODE", "simulated")

# -----------------------------------------------------------------------------
# OpenMeter usage events (disabled without a key)
# -----------------------------------------------------------------------------
OPENMETER_API_URL = os.getenv("OPENMETER_API_URL", "https://api.cloud.openmeter.io")
OPENMETER_API_KEY = os.getenv("OPENMETER_API_KEY")
