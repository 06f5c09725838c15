import sys
from pathlib import Path

import pytest

# Get the project root directory (one level above tests/)
ROOT_DIR = Path(__file__).resolve().parents[1]

# Add the root directory to sys.path so "import src" works
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from src.invoicing.config import ProviderConfig  # noqa: E402

TEST_KEY = "12345678901234567890123456789012"   # AES-256
TEST_IV = "abcdefghijklmnop"


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(
        merchant_id="31090553",
        url="https://cinv.ezpay.com.tw/Api/invoice_issue",
        key=TEST_KEY,
        iv=TEST_IV,
        api_version="",
        timeout=5.0,
    )
