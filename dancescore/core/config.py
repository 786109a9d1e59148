import os
from dotenv import load_dotenv
from pydantic_settings import BaseSettings

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '../../'))
load_dotenv(os.path.join(BASE_DIR, '.env'))


class Settings(BaseSettings):
    PROJECT_NAME: str = os.getenv('PROJECT_NAME', 'DANCESCORE')
    LOGGING_CONFIG_FILE: str = os.path.join(BASE_DIR, 'logging.ini')
    LOG_DIR: str = os.getenv('DANCESCORE_LOG_DIR', os.path.join(BASE_DIR, 'data', 'logs'))

    # Comparator
    SCORE_THRESHOLD: float = float(os.getenv('SCORE_THRESHOLD', '0.1'))
    OCCLUSION_PENALTY: float = float(os.getenv('OCCLUSION_PENALTY', '-10'))

    # Diagnostics
    BAD_KEYPOINT_THRESHOLD: float = 40.0
    MAX_TIMESTAMP_MAPPING_DIFF_MS: float = 1000.0
    GREAT_THRESHOLD: float = 90.0
    GOOD_THRESHOLD: float = 70.0
    OKAY_THRESHOLD: float = 50.0
    BAD_THRESHOLD: float = 30.0

    # Calibration
    CALIBRATION_SCORE_THRESHOLD: float = float(os.getenv('CALIBRATION_SCORE_THRESHOLD', '95'))
    CALIBRATION_MAX_WINDOW_MS: float = float(os.getenv('CALIBRATION_MAX_WINDOW_MS', '2000'))
    CALIBRATION_MIN_EVENT_GAP_MS: float = 300.0
    OFFSET_MATCH_TOLERANCE_MS: float = 500.0


settings = Settings()
