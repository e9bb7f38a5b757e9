"""Utility functions for loading OpenAPI documents.

This module provides functions for loading JSON or YAML documents from files,
URLs and raw text with proper error handling and validation.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests
import yaml

from .logging_config import get_logger

logger = get_logger(__name__)


class DocumentLoaderError(Exception):
    """Custom exception for document loading errors."""

    pass


def parse_document(text: str, source: str = "<text>") -> dict[str, Any]:
    """Parse document text as JSON, falling back to YAML.

    Args:
        text: Raw document content.
        source: Description of where the text came from, for messages.

    Returns:
        The parsed document.

    Raises:
        DocumentLoaderError: If the text is neither valid JSON nor YAML, or
            does not contain an object at the root.
    """
    try:
        data = json.loads(text)
        logger.debug(f"Parsed {source} as JSON")
    except json.JSONDecodeError as json_error:
        try:
            data = yaml.safe_load(text)
            logger.debug(f"Parsed {source} as YAML")
        except yaml.YAMLError as yaml_error:
            logger.error(f"Could not parse {source}", exc_info=True)
            raise DocumentLoaderError(
                f"Parse openapi (json/yaml) failed for {source}: "
                f"jsonErr={json_error} yamlErr={yaml_error}"
            ) from yaml_error

    if not isinstance(data, dict):
        raise DocumentLoaderError(
            f"Expected an object at the root of {source}, got {type(data).__name__}"
        )
    return data


def load_document_from_file(file_path: str | Path) -> tuple[str, dict[str, Any]]:
    """Load an OpenAPI document from a local file.

    Args:
        file_path: Path to the JSON or YAML file.

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        FileNotFoundError: If file doesn't exist.
        DocumentLoaderError: If file cannot be read or parsed.
    """
    file_path = Path(file_path)
    logger.debug(f"Attempting to load document from file: {file_path}")

    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() not in {".json", ".yaml", ".yml"}:
        logger.warning(f"Unexpected file extension, trying anyway: {file_path}")

    try:
        text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading file {file_path}: {e}", exc_info=True)
        raise DocumentLoaderError(f"Error reading file {file_path}: {e}") from e

    data = parse_document(text, str(file_path))
    logger.info(f"Successfully loaded document from {file_path}")
    return f"📄 {file_path}", data


def load_document_from_url(url: str, timeout: int = 30) -> tuple[str, dict[str, Any]]:
    """Load an OpenAPI document from a URL.

    Args:
        url: URL to fetch the document from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        DocumentLoaderError: If URL is invalid, request fails, or the
            response isn't a valid document.
    """
    logger.debug(f"Attempting to load document from URL: {url}")

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error(f"Invalid URL format: {url}")
        raise DocumentLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        logger.error(f"Request timeout for URL: {url}")
        raise DocumentLoaderError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error for URL {url}: {e}")
        raise DocumentLoaderError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error(f"HTTP error {e.response.status_code} for URL: {url}")
        raise DocumentLoaderError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Request error for URL {url}: {e}", exc_info=True)
        raise DocumentLoaderError(f"Request error for URL {url}: {e}") from e

    data = parse_document(response.text, url)
    logger.info(f"Successfully loaded document from {url}")
    return f"🌐 {url}", data


def load_document(
    file_path: str | Path | None = None,
    url: str | None = None,
    timeout: int = 30,
) -> tuple[str, dict[str, Any]]:
    """Load an OpenAPI document from either a file or URL.

    Args:
        file_path: Path to local file (mutually exclusive with url).
        url: URL to fetch from (mutually exclusive with file_path).
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        DocumentLoaderError: If neither or both parameters are provided, or loading fails.
        FileNotFoundError: If file doesn't exist.
    """
    if not file_path and not url:
        logger.error("Neither file_path nor url provided")
        raise DocumentLoaderError("Either file_path or url must be provided")

    if file_path and url:
        logger.error("Both file_path and url provided")
        raise DocumentLoaderError("Cannot specify both file_path and url")

    if file_path:
        return load_document_from_file(file_path)
    else:
        return load_document_from_url(url, timeout)
