# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/errors.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Exception hierarchy for fatal deployment failures

"""
Deployment errors.

Every fatal gate in the orchestrator raises a DeploymentError subclass.
The orchestrator catches them at its boundary and turns them into exit codes.
"""

GENERIC_FAILURE_CODE = 1


class DeploymentError(Exception):
    """Raised when a fatal deployment gate fails"""

    def __init__(self, message: str, exit_code: int = GENERIC_FAILURE_CODE):
        super().__init__(message)
        self.exit_code = exit_code


class SettingsError(DeploymentError):
    """Raised when deployer settings are missing or invalid"""
    pass


class WorkingAreaError(DeploymentError):
    """Raised when the scratch directory cannot be prepared"""
    pass


class DownloadError(DeploymentError):
    """Raised when a remote resource cannot be retrieved by any transport"""

    def __init__(self, message: str, url: str, destination):
        super().__init__(message)
        self.url = url
        self.destination = destination


class TrustVerificationError(DeploymentError):
    """Raised when the installer artifact is not trusted"""
    pass


class ConfigurationDocumentError(DeploymentError):
    """Raised when a required configuration document is unavailable"""
    pass


class InstallerLaunchError(DeploymentError):
    """Raised when the installer subprocess cannot be started"""
    pass


class ProductStateError(DeploymentError):
    """Raised when Click-to-Run product state cannot be read"""
    pass
