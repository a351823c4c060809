import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Database server address used by the remote store
SERVER_URL = os.getenv('SERVER_URL', 'http://localhost:5000')
PORT = int(os.getenv('PORT', '5000'))

# 'remote' pushes through the database server, 'local' polls JSON files on this machine
STORE_BACKEND = os.getenv('STORE_BACKEND', 'remote')
LOCAL_STORE_DIR = os.getenv('LOCAL_STORE_DIR', os.path.join('.hp_tracker', 'store'))
SESSION_FILE = os.getenv('SESSION_FILE', os.path.join('.hp_tracker', 'session.json'))

POLL_INTERVAL = float(os.getenv('POLL_INTERVAL', '1.0'))  # seconds between roster reads on the local store
REQUEST_TIMEOUT = float(os.getenv('REQUEST_TIMEOUT', '5'))  # seconds to wait for a server reply
