import os
from dotenv import load_dotenv

load_dotenv()

DATA_DIR = os.getenv("DATA_DIR", "var/data")

# Key custody: raw base64 key wins over the PEM path; neither set means an ephemeral key
SIGNING_PRIVATE_KEY = os.getenv("SIGNING_PRIVATE_KEY")
SIGNING_KEY_PATH = os.getenv("SIGNING_KEY_PATH", "keys/attestor_ed25519_sk.pem")

# Approval sessions expire after 24h unless overridden
SESSION_TTL_MS = int(os.getenv("SESSION_TTL_MS", str(24 * 60 * 60 * 1000)))
MAX_DOCUMENT_BYTES = int(os.getenv("MAX_DOCUMENT_BYTES", str(10 * 1024 * 1024)))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
METRICS_ENABLED = os.getenv("METRICS_ENABLED", "true").lower() == "true"
