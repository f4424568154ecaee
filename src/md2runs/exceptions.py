#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the md2runs library.

This module defines specialized exception classes for the error conditions
that can occur while parsing markdown, converting a document tree into styled
runs, and loading remote images.

Exception Hierarchy
-------------------
- Md2RunsError (base exception)

  - ValidationError (parameter/option validation)
    - InvalidOptionsError (wrong options class for a component)

  - MalformedTreeError (cyclic or unbounded ancestor chains)

  - ImageError (image subsystem failures)
    - ImageFetchError (network retrieval failures)
    - ImageDecodeError (payload is not a decodable image)

  - SecurityError (security violations)
    - NetworkSecurityError (blocked schemes, hosts, oversized payloads)

  - DependencyError (missing/incompatible packages)

Malformed link and image URIs are never raised: the converter recovers from
them locally by omitting the affected attribute.

"""

from typing import Any


class Md2RunsError(Exception):
    """Base exception class for all md2runs-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(Md2RunsError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class InvalidOptionsError(ValidationError):
    """Exception raised when a component receives the wrong options class.

    Parameters
    ----------
    component_name : str
        Name of the component that received invalid options
    expected_type : type
        The expected options class type
    received_type : type
        The actual options class type that was received

    """

    def __init__(
        self,
        component_name: str,
        expected_type: type,
        received_type: type,
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the invalid options error."""
        if message is None:
            message = (
                f"{component_name} expected options of type '{expected_type.__name__}' "
                f"but received '{received_type.__name__}'."
            )
        super().__init__(
            message, parameter_name="options", parameter_value=received_type, original_error=original_error
        )
        self.component_name = component_name
        self.expected_type = expected_type
        self.received_type = received_type


class MalformedTreeError(Md2RunsError):
    """Exception raised when a document tree violates the acyclic/finite contract.

    The external parser guarantees a finite, acyclic tree. Ancestor walks are
    bounded, and exceeding the bound is reported with this error instead of
    looping forever.

    Parameters
    ----------
    message : str
        Description of the violation
    node_kind : str, optional
        Kind of the node where the walk started

    """

    def __init__(self, message: str, node_kind: str | None = None, original_error: Exception | None = None):
        """Initialize the malformed tree error."""
        super().__init__(message, original_error=original_error)
        self.node_kind = node_kind


class ImageError(Md2RunsError):
    """Base exception for image retrieval and decoding failures.

    Parameters
    ----------
    message : str
        Description of the failure
    url : str, optional
        The image URL involved
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, url: str | None = None, original_error: Exception | None = None):
        """Initialize the image error with the offending URL."""
        super().__init__(message, original_error=original_error)
        self.url = url


class ImageFetchError(ImageError):
    """Exception raised when an image cannot be retrieved from the network."""


class ImageDecodeError(ImageError):
    """Exception raised when a retrieved payload cannot be decoded as an image."""


class SecurityError(Md2RunsError):
    """Base exception for security violations."""


class NetworkSecurityError(SecurityError):
    """Exception raised when a network request violates the configured policy.

    This includes disallowed schemes or hosts, globally disabled network
    access, and payloads exceeding the download ceiling.

    """


class DependencyError(Md2RunsError):
    """Exception raised when required dependencies are not available.

    Parameters
    ----------
    component_name : str
        Name of the component requiring dependencies
    missing_packages : list[tuple[str, str]]
        List of (package_name, version_spec) tuples for missing packages
    version_mismatches : list[tuple[str, str, str]], optional
        List of (package_name, required_version, installed_version) tuples
    message : str, optional
        Custom error message. If not provided, generates a helpful message

    """

    def __init__(
        self,
        component_name: str,
        missing_packages: list[tuple[str, str]],
        version_mismatches: list[tuple[str, str, str]] | None = None,
        message: str | None = None,
        original_import_error: ImportError | None = None,
    ):
        """Initialize the dependency error with package details."""
        version_mismatches = version_mismatches or []
        self.original_import_error = original_import_error
        if message is None:
            message_parts = []

            if missing_packages:
                pkg_list = ", ".join(f"'{name}{spec}'" if spec else f"'{name}'" for name, spec in missing_packages)
                message_parts.append(f"{component_name} requires the following packages: {pkg_list}")

            if version_mismatches:
                mismatch_str = ", ".join(
                    f"'{name}' (requires {required}, but {installed} is installed)"
                    for name, required, installed in version_mismatches
                )
                message_parts.append(f"{component_name} has version mismatches: {mismatch_str}")

            message = "\n".join(message_parts)

            all_packages = missing_packages + [(name, req) for name, req, _ in version_mismatches]
            if all_packages:
                packages_str = " ".join(f'"{name}{spec}"' if spec else name for name, spec in all_packages)
                message += f"\nInstall with: pip install --upgrade {packages_str}"

        super().__init__(message, original_error=original_import_error)
        self.component_name = component_name
        self.missing_packages = missing_packages
        self.version_mismatches = version_mismatches
