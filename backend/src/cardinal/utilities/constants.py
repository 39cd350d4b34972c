import os

# ------------ Config ------------
TOPIC_NAME = os.getenv("CARDINAL_TOPIC", "hello_topic")

MAX_CONTENT_BYTES = 256       # native buffer size, NUL terminator included
DISPLAY_QUEUE_SIZE = 20       # envelopes kept for the dashboard
MOCK_BUFFER_SIZE = 100        # shared ring buffer of the mock transport

PUBLISH_INTERVAL = float(os.getenv("CARDINAL_PUBLISH_INTERVAL", 2.0))     # seconds
RECEIVE_INTERVAL = float(os.getenv("CARDINAL_RECEIVE_INTERVAL", 0.01))    # seconds
UI_TICK_INTERVAL = float(os.getenv("CARDINAL_UI_TICK_INTERVAL", 0.05))    # seconds
ACTIVITY_WINDOW = 1.0         # queue changed within this many seconds -> active

# Native transport
FASTDDS_LIBRARY = os.getenv("CARDINAL_FASTDDS_LIB", "libcardinal-fastdds.so")
FORCE_MOCK = os.getenv("CARDINAL_FORCE_MOCK", "").lower() in ("1", "true", "yes")

# Mode labels
MODE_REAL = "real"
MODE_MOCK_FALLBACK = "mock-fallback"

# Logging
LOG_LEVEL = os.getenv("CARDINAL_LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("CARDINAL_LOG_FILE", "cardinal.log")

# HTTP surface
HTTP_HOST = os.getenv("CARDINAL_HOST", "127.0.0.1")
HTTP_PORT = int(os.getenv("CARDINAL_PORT", 8000))
# --------------------------------
