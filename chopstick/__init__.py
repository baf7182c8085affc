import os
from datetime import datetime

__version__ = "0.4.0"

# ---------------- Configuration Constants ----------------

DEFAULT_BUFFER_CEILING = int(os.getenv("CHOPSTICK_BUFFER_CEILING", 256 * 1024 * 1024))
LOG_DIR = os.getenv("CHOPSTICK_LOG_DIR", "")

# Ensure log directory exists
if LOG_DIR:
    os.makedirs(LOG_DIR, exist_ok=True)

# ---------------- Shared Logging Function ----------------

def log(message, context="CHOP"):
    timestamp = datetime.now().strftime("[%Y-%m-%d %H:%M:%S]")
    formatted = f"[{context}] {timestamp} {message}"

    if LOG_DIR:
        log_file = os.path.join(LOG_DIR, f"{context.lower()}.log")
        with open(log_file, "a") as f:
            f.write(formatted + "\n")

    print(formatted)

# ---------------- Public API ----------------

__all__ = ["DEFAULT_BUFFER_CEILING", "LOG_DIR", "log", "__version__"]
