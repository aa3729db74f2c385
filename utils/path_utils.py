from pathlib import Path


# Project root (the directory holding config/, data/ and log/)
BASE_DIR = Path(__file__).resolve().parents[1]

CONFIG_DIR = BASE_DIR / 'config'
LOG_DIR = BASE_DIR / 'log'
DATA_DIR = BASE_DIR / 'data'
REPORT_DIR = DATA_DIR / 'reports'

LOG_FILE = LOG_DIR / 'sys.log'


if __name__ == "__main__":
    print("BASE_DIR:", BASE_DIR)
    print("CONFIG_DIR:", CONFIG_DIR)
    print("LOG_DIR:", LOG_DIR)
    print("DATA_DIR:", DATA_DIR)
