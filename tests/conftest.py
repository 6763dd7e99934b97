"""
Pytest configuration for docgen
"""

import pytest
import logging
import sys
from io import BytesIO

import yaml
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen.canvas import Canvas

from docgen.config import GeneratorOptions


@pytest.fixture(autouse=True)
def configure_logging():
    """Configure logging for tests to avoid file handler issues."""
    # Clear all existing handlers
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    # Set up console-only logging for tests
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)  # Only show warnings and errors during tests

    formatter = logging.Formatter(
        '%(name)s - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)
    root_logger.setLevel(logging.WARNING)

    yield

    # Cleanup after test
    root_logger.handlers.clear()


@pytest.fixture
def template_dir(tmp_path):
    """Directory used as the only template root."""
    root = tmp_path / "templates_root"
    root.mkdir()
    return root


@pytest.fixture
def options(template_dir):
    return GeneratorOptions(template_roots=[template_dir])


@pytest.fixture
def write_template(template_dir):
    """Write a template document as YAML and return its path."""
    def _write(template_id, document):
        path = template_dir / f"{template_id}.yaml"
        path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
        return path
    return _write


@pytest.fixture
def write_resource(template_dir):
    """Write a section resource (Jinja2 text or PDF bytes) under the template root."""
    def _write(name, content):
        path = template_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path
    return _write


def build_form_pdf(text_fields=(), checkboxes=(), pages=1):
    """Create an AcroForm PDF with reportlab.

    Every field is placed on the first page; further pages are blank.
    """
    buffer = BytesIO()
    canvas = Canvas(buffer, pagesize=letter)
    canvas.setFont("Helvetica", 10)
    y = 700
    for name in text_fields:
        canvas.drawString(50, y + 5, name)
        canvas.acroForm.textfield(name=name, x=200, y=y, width=250, height=18, borderStyle="inset")
        y -= 30
    for name in checkboxes:
        canvas.drawString(50, y + 5, name)
        canvas.acroForm.checkbox(name=name, x=200, y=y, size=14, buttonStyle="check")
        y -= 30
    canvas.showPage()
    for _ in range(pages - 1):
        canvas.setFont("Helvetica", 10)
        canvas.drawString(50, 700, "continued")
        canvas.showPage()
    canvas.save()
    return buffer.getvalue()


@pytest.fixture
def form_pdf():
    return build_form_pdf


@pytest.fixture
def enrollment_data():
    """Data tree shaped like an insurance enrollment request."""
    return {
        "applicant": {
            "firstName": "Jane",
            "lastName": "Doe",
            "phone": "5551234567",
            "address": {"city": "Springfield", "state": "IL"},
        },
        "applicants": [
            {"type": "PRIMARY", "name": "Jane Doe", "dateOfBirth": "1990-05-15"},
            {"type": "SPOUSE", "name": "John Doe", "dateOfBirth": "1992-08-20"},
        ],
        "children": [
            {"name": "Ann", "age": 7},
            {"name": "Ben", "age": 5},
            {"name": "Cid", "age": 2},
        ],
        "status": "ACTIVE",
        "smoker": True,
    }


# Configure pytest to ignore logging errors
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    # Ignore logging errors during tests
    logging.raiseExceptions = False
