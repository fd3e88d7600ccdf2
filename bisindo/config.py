"""
Runtime settings, read once from the environment (and bisindo/.env if present).
"""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv(dotenv_path=Path(__file__).parent / ".env", override=False)

# Remote classifier
INFERENCE_URL       = os.getenv("INFERENCE_URL", "https://flaskapp.angelica.cloud/predict")
INFERENCE_TIMEOUT_S = float(os.getenv("INFERENCE_TIMEOUT_S", "5.0"))
INFERENCE_ADAPTER   = os.getenv("INFERENCE_ADAPTER", "http").lower()   # http | mock

# Camera: cv2 | mock
CAMERA_ADAPTER      = os.getenv("CAMERA_ADAPTER", "cv2").lower()
CAMERA_INDEX        = int(os.getenv("CAMERA_INDEX", "0"))
CAMERA_JPEG_QUALITY = int(os.getenv("CAMERA_JPEG_QUALITY", "40"))       # raw shot, before preprocessing

# Gallery picker permission (no native dialog on a server): granted | denied
GALLERY_PERMISSION  = os.getenv("GALLERY_PERMISSION", "granted").lower()

# Continuous mode
LOOP_INTERVAL_MS    = int(os.getenv("LOOP_INTERVAL_MS", "1000"))

# Display: confidence percent strictly above this is shown green
CONFIDENCE_GOOD_PCT = float(os.getenv("CONFIDENCE_GOOD_PCT", "70"))

LOG_LEVEL           = os.getenv("LOG_LEVEL", "INFO").upper()
