from pathlib import Path

import pytest

from memexfs.core import MemexFS

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "docs"


@pytest.fixture(scope="session")
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture(scope="session")
def corpus_fs() -> MemexFS:
    return MemexFS.from_directory(FIXTURES_DIR)


@pytest.fixture()
def small_fs() -> MemexFS:
    return MemexFS.from_documents(
        [
            (
                "account/password-reset.md",
                "# Password Reset\n\n## How to reset your password\n\n1. Go to Settings\n2. Click Reset Password",
            ),
            (
                "billing/refund.md",
                "# Refunds\n\nTo request a refund, contact support.\n\nRefunds are processed within 5 business days.",
            ),
        ]
    )
