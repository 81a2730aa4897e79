import os
from dotenv import load_dotenv

# Load .env from current working directory (safe to call multiple times)
load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

APP_ENV = os.getenv('APP_ENV', 'development').lower().strip()
IS_PRODUCTION = APP_ENV == 'production'

LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

# Comma separated; "*" allows any origin (mobile clients, local dev)
CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', '*').split(',') if o.strip()]

# Bearer tokens
TOKEN_TTL_HOURS = int(os.getenv('TOKEN_TTL_HOURS', '168'))

# Image storage: S3 when a bucket is configured, local disk otherwise
S3_BUCKET = os.getenv('S3_BUCKET', '').strip()
S3_PREFIX = os.getenv('S3_PREFIX', 'diagnoses').strip('/')
AWS_REGION = os.getenv('AWS_REGION') or None
STORAGE_DIR = os.getenv('STORAGE_DIR', os.path.join(BASE_DIR, 'storage'))
IMAGES_DIR = os.path.join(STORAGE_DIR, 'images')
MAX_IMAGE_BYTES = int(os.getenv('MAX_IMAGE_BYTES', str(5 * 1024 * 1024)))

# Minimum symptom overlap for a symptom-driven match; 0 accepts any candidate
MIN_SYMPTOM_MATCHES = int(os.getenv('MIN_SYMPTOM_MATCHES', '1'))

SEED_CATALOG = os.getenv('SEED_CATALOG', '1') == '1'
