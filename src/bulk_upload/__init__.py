"""Bulk product upload - spreadsheet ingestion into vendor catalogs"""

from .batch import BatchResult, process_rows
from .committer import commit_drafts
from .errors import BulkUploadError, EmptyFileError, StoreNotFoundError, UnreadableFileError
from .fields import extract_field, to_boolean, to_integer, to_number, to_text
from .normalizer import (
    normalize_row,
    process_general_product,
    process_medical_product,
    process_restaurant_product,
)
from .profiles import GENERAL, MEDICAL, RESTAURANT, StoreProfile, get_profile
from .service import run_bulk_upload
from .sheet_loader import load_rows
from .templates import generate_template

__all__ = [
    'BatchResult',
    'process_rows',
    'commit_drafts',
    'BulkUploadError',
    'EmptyFileError',
    'StoreNotFoundError',
    'UnreadableFileError',
    'extract_field',
    'to_boolean',
    'to_integer',
    'to_number',
    'to_text',
    'normalize_row',
    'process_general_product',
    'process_medical_product',
    'process_restaurant_product',
    'GENERAL',
    'MEDICAL',
    'RESTAURANT',
    'StoreProfile',
    'get_profile',
    'run_bulk_upload',
    'load_rows',
    'generate_template',
]
