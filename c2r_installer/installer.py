# Path and File Name : /home/c2rdeploy/rebuild/c2r_installer/installer.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Main deployment orchestrator - fetches and verifies the installer, prepares the configuration document, runs the installer and confirms the result

"""
Click-to-Run Deployer: main orchestrator for install and uninstall runs.

State machine:
    Init -> WorkingAreaReady -> ArtifactFetched -> ArtifactVerified
         -> ConfigReady -> SubprocessRunning -> SubprocessDone
         -> {ConfirmedInstall | ConfirmedUninstall | Failed}
         -> CleanedUp -> Terminal

FAIL-CLOSED gates: working area, installer download, trust verification,
configuration document, installer launch. No subprocess is ever started for
an artifact that did not pass trust verification. The working area is removed
on every path.
"""

import argparse
import logging
import shutil
import subprocess
import sys
import time
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, List, Optional

import psutil

from c2r_state.install_poller import InstallationPoller
from c2r_state.product_state import (
    ProductSnapshot,
    ProductStateReadError,
    ProductStateSource,
    RegistryProductState,
)

from .configuration import (
    INSTALL_ACTION,
    INSTALL_TEMPLATE,
    REMOVE_ACTION,
    UNINSTALL_TEMPLATE,
    ConfigurationMutator,
    read_product_id,
)
from .crypto.trust_verifier import TrustedRootStore, TrustVerifier
from .errors import (
    GENERIC_FAILURE_CODE,
    ConfigurationDocumentError,
    DeploymentError,
    InstallerLaunchError,
    ProductStateError,
    SettingsError,
    TrustVerificationError,
)
from .fetch.downloader import Downloader
from .log_setup import setup_logging
from .models import (
    PRODUCT_IDS,
    SUCCESS_CODE,
    DeployState,
    OperationMode,
    OperationRequest,
    RunOutcome,
)
from .services.app_closer import SuiteAppCloser, clamp_timeout
from .services.service_controller import ServiceController
from .settings import DeployerSettings, load_settings
from .working_area import WorkingArea

logger = logging.getLogger(__name__)

REMOTE_DOCUMENT_NAME = "configuration.xml"


class ClickToRunDeployer:
    """Main deployment orchestrator."""

    def __init__(self, settings: DeployerSettings, request: OperationRequest, *,
                 working_area: Optional[WorkingArea] = None,
                 downloader: Optional[Downloader] = None,
                 verifier: Optional[TrustVerifier] = None,
                 mutator: Optional[ConfigurationMutator] = None,
                 product_state: Optional[ProductStateSource] = None,
                 poller: Optional[InstallationPoller] = None,
                 service_controller: Optional[ServiceController] = None,
                 app_closer: Optional[SuiteAppCloser] = None,
                 runner: Callable = subprocess.run,
                 sleep: Callable[[float], None] = time.sleep,
                 log: Optional[logging.Logger] = None):
        self.settings = settings
        self.request = request
        self.log = log or logger

        self.working_area = working_area or WorkingArea(settings.working_root, log=self.log)
        self.downloader = downloader or Downloader(
            timeout=settings.download_timeout,
            chunk_size=settings.download_chunk_size,
            log=self.log,
        )
        # Built on first use inside run()
        self.verifier = verifier
        self.mutator = mutator or ConfigurationMutator(log=self.log)
        self.product_state = product_state or RegistryProductState(settings.client_executables)
        self.poller = poller or InstallationPoller(self.product_state, log=self.log)
        self.service_controller = service_controller or ServiceController(log=self.log)
        self.app_closer = app_closer or SuiteAppCloser(settings.app_process_names, log=self.log)
        self.runner = runner
        self.sleep = sleep

        self.state = DeployState.INIT
        self.history: List[DeployState] = [DeployState.INIT]

    def _transition(self, state: DeployState) -> None:
        self.log.info(f"State: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    # ------------------------------------------------------------------
    # Fatal gates
    # ------------------------------------------------------------------

    def _fetch_installer(self, work_dir: Path) -> Path:
        self.log.info(f"Fetching installer from {self.settings.installer_url}")
        return self.downloader.fetch(
            self.settings.installer_url,
            work_dir,
            self.settings.installer_file_name,
        )

    def _build_verifier(self) -> TrustVerifier:
        try:
            root_store = TrustedRootStore.load(self.settings.root_store)
        except (OSError, ValueError, RuntimeError) as e:
            raise TrustVerificationError(f"Cannot load trusted root store '{self.settings.root_store}': {e}")

        return TrustVerifier(
            root_store,
            vendor_organization=self.settings.vendor_organization,
            vendor_root_common_name=self.settings.vendor_root_common_name,
            log=self.log,
        )

    def _verify_installer(self, installer_path: Path) -> None:
        """
        Gate the installer on trust verification.

        Raises:
            TrustVerificationError: If the artifact is not trusted
        """
        if self.verifier is None:
            self.verifier = self._build_verifier()

        if not self.verifier.verify(installer_path):
            raise TrustVerificationError(
                f"Installer {installer_path} failed trust verification; refusing to execute it"
            )

    def _copy_packaged_document(self, template: Path, work_dir: Path) -> Path:
        target = work_dir / template.name
        try:
            shutil.copyfile(template, target)
        except OSError as e:
            raise ConfigurationDocumentError(f"Cannot copy packaged document {template} to {target}: {e}")
        self.log.info(f"Using packaged configuration document {template.name}")
        return target

    def _apply_override(self, document: Path, action: str) -> None:
        if self.request.product_id is None:
            return
        if not self.mutator.set_product_id(document, self.request.product_id, action):
            self.log.warning(
                f"Product override {self.request.product_id} not applied; "
                f"continuing with {document.name} as shipped"
            )

    def _prepare_install_document(self, work_dir: Path) -> Path:
        if self.request.config_url:
            self.log.info(f"Fetching configuration document from {self.request.config_url}")
            document = self.downloader.fetch(self.request.config_url, work_dir, REMOTE_DOCUMENT_NAME)
        else:
            document = self._copy_packaged_document(INSTALL_TEMPLATE, work_dir)

        self._apply_override(document, INSTALL_ACTION)
        return document

    def _prepare_uninstall_document(self, work_dir: Path) -> Path:
        if self.request.config_url:
            self.log.warning(
                f"Configuration URL {self.request.config_url} is ignored for uninstall; "
                f"using the packaged removal document"
            )

        document = self._copy_packaged_document(UNINSTALL_TEMPLATE, work_dir)
        self._apply_override(document, REMOVE_ACTION)
        return document

    # ------------------------------------------------------------------
    # Product state
    # ------------------------------------------------------------------

    def _uninstall_target(self) -> Optional[str]:
        """Product to remove: the override, else the one the removal document names."""
        if self.request.product_id:
            return self.request.product_id

        try:
            return read_product_id(UNINSTALL_TEMPLATE, REMOVE_ACTION)
        except (ET.ParseError, OSError) as e:
            raise ConfigurationDocumentError(f"Cannot read packaged removal document {UNINSTALL_TEMPLATE}: {e}")

    def _read_product_state(self) -> Optional[ProductSnapshot]:
        try:
            return self.product_state.read()
        except ProductStateReadError as e:
            raise ProductStateError(f"Cannot read Click-to-Run product state: {e}")

    def _is_installed(self, product_id: Optional[str]) -> bool:
        """True if product_id is installed; with no product_id, if any product is."""
        snapshot = self._read_product_state()
        if snapshot is None:
            return False
        if product_id is None:
            return bool(snapshot.product_release_ids)
        return snapshot.has_product(product_id)

    # ------------------------------------------------------------------
    # Installer subprocess
    # ------------------------------------------------------------------

    def _close_suite_apps(self) -> None:
        if not self.settings.app_close_enabled:
            return

        grace = clamp_timeout(
            self.request.app_close_timeout,
            self.settings.app_close_default_timeout,
            self.settings.app_close_min_timeout,
            self.settings.app_close_max_timeout,
        )
        try:
            self.app_closer.close_running_apps(grace)
        except (psutil.Error, OSError) as e:
            self.log.warning(f"Failed to close running suite applications: {e}")

    def _run_installer(self, installer_path: Path, document: Path, work_dir: Path) -> int:
        """
        Run the installer synchronously with an argument vector.

        Raises:
            InstallerLaunchError: If the process cannot be started or outlives
                installer_timeout
        """
        argv = [str(installer_path), self.settings.configure_switch, str(document)]
        self.log.info(f"Running installer: {argv}")

        try:
            result = self.runner(argv, cwd=str(work_dir), check=False,
                                 timeout=self.settings.installer_timeout)
        except subprocess.TimeoutExpired:
            raise InstallerLaunchError(
                f"Installer {installer_path} did not exit within {self.settings.installer_timeout:.0f}s"
            )
        except (OSError, subprocess.SubprocessError) as e:
            raise InstallerLaunchError(f"Failed to launch installer {installer_path}: {e}")

        self.log.info(f"Installer exited with code {result.returncode}")
        return result.returncode

    # ------------------------------------------------------------------
    # Confirmation
    # ------------------------------------------------------------------

    def _confirm_install(self, exit_code: int) -> int:
        if exit_code != SUCCESS_CODE:
            self.log.error(f"Installer reported failure (exit code {exit_code})")
            self._transition(DeployState.FAILED)
            return exit_code

        if not self.poller.wait_for_completion(self.settings.completion_timeout,
                                               self.settings.completion_poll_interval):
            self.log.warning("Installation completion not confirmed; installer reported success")

        if not self.service_controller.quiesce(self.settings.service_name,
                                               self.settings.service_stop_wait,
                                               self.settings.service_poll_interval):
            self.log.warning(f"Service {self.settings.service_name} not quiesced")

        self._transition(DeployState.CONFIRMED_INSTALL)
        return SUCCESS_CODE

    def _confirm_uninstall(self, exit_code: int, target: Optional[str]) -> int:
        if exit_code not in self.settings.tentative_success_codes:
            self.log.error(f"Installer reported removal failure (exit code {exit_code})")
            self._transition(DeployState.FAILED)
            return exit_code

        self.log.info(
            f"Removal tentatively succeeded (exit code {exit_code}); "
            f"re-checking product state in {self.settings.uninstall_settle_seconds:.0f}s"
        )
        self.sleep(self.settings.uninstall_settle_seconds)

        if self._is_installed(target):
            self.log.error(
                f"Product {target or '<any>'} still present after removal "
                f"(installer exit code {exit_code})"
            )
            self._transition(DeployState.FAILED)
            return GENERIC_FAILURE_CODE

        self._transition(DeployState.CONFIRMED_UNINSTALL)
        return SUCCESS_CODE

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def _execute(self) -> int:
        mode = self.request.mode
        self.log.info(
            f"Starting {mode.value}: product={self.request.product_id or '<document default>'}, "
            f"config_url={self.request.config_url or '<packaged>'}"
        )

        work_dir = self.working_area.prepare()
        self._transition(DeployState.WORKING_AREA_READY)

        installer_path = self._fetch_installer(work_dir)
        self._transition(DeployState.ARTIFACT_FETCHED)

        self._verify_installer(installer_path)
        self._transition(DeployState.ARTIFACT_VERIFIED)

        target = None
        if mode == OperationMode.INSTALL:
            document = self._prepare_install_document(work_dir)
        else:
            target = self._uninstall_target()
            if not self._is_installed(target):
                self.log.info(f"Product {target or '<any>'} is not installed; nothing to remove")
                self._transition(DeployState.CONFIRMED_UNINSTALL)
                return SUCCESS_CODE
            document = self._prepare_uninstall_document(work_dir)

        if not document.is_file():
            raise ConfigurationDocumentError(f"Required configuration document missing: {document}")
        self._transition(DeployState.CONFIG_READY)

        self._close_suite_apps()

        self._transition(DeployState.SUBPROCESS_RUNNING)
        exit_code = self._run_installer(installer_path, document, work_dir)
        self._transition(DeployState.SUBPROCESS_DONE)

        if mode == OperationMode.INSTALL:
            return self._confirm_install(exit_code)
        return self._confirm_uninstall(exit_code, target)

    def run(self) -> RunOutcome:
        """
        Execute one deployment run.

        Never raises. Every failure is logged at error level, the working
        area is removed and a nonzero exit code is returned.

        Returns:
            RunOutcome with the exit code and visited states
        """
        exit_code = GENERIC_FAILURE_CODE
        try:
            exit_code = self._execute()
        except DeploymentError as e:
            self.log.error(f"Deployment failed in state {self.state.value}: {e}")
            exit_code = e.exit_code
            self._transition(DeployState.FAILED)
        except Exception as e:
            self.log.error(f"Unexpected error in state {self.state.value}: {e}", exc_info=True)
            exit_code = GENERIC_FAILURE_CODE
            self._transition(DeployState.FAILED)
        finally:
            self.working_area.teardown()
            self._transition(DeployState.CLEANED_UP)

        self._transition(DeployState.TERMINAL)
        if exit_code == SUCCESS_CODE:
            self.log.info(f"✓ {self.request.mode.value} completed successfully")
        else:
            self.log.error(f"{self.request.mode.value} failed with exit code {exit_code}")

        return RunOutcome(
            exit_code=exit_code,
            mode=self.request.mode,
            final_state=self.state,
            history=list(self.history),
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="c2r-deployer",
        description="Install or remove the Click-to-Run suite",
    )
    parser.add_argument('--mode', type=OperationMode.parse, default=OperationMode.INSTALL,
                        help="Install or Uninstall (default: Install)")
    parser.add_argument('--product-id', choices=PRODUCT_IDS,
                        help="Product identifier override")
    parser.add_argument('--config-url',
                        help="Remote configuration document URL (install only)")
    parser.add_argument('--app-close-timeout', type=int,
                        help="Seconds to wait for suite applications to close")
    parser.add_argument('--settings', type=Path,
                        help="YAML settings override file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Returns the process exit code; never raises.
    """
    try:
        args = build_parser().parse_args(argv)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else GENERIC_FAILURE_CODE

    try:
        settings = load_settings(args.settings)
    except SettingsError as e:
        print(f"✗ Settings error: {e}", file=sys.stderr)
        return e.exit_code

    try:
        log = setup_logging(settings.log_path, settings.log_level)
    except OSError as e:
        print(f"✗ Cannot open log file: {e}", file=sys.stderr)
        return GENERIC_FAILURE_CODE

    try:
        request = OperationRequest(
            mode=args.mode,
            product_id=args.product_id,
            config_url=args.config_url,
            app_close_timeout=args.app_close_timeout,
        )
    except ValueError as e:
        log.error(f"Invalid invocation: {e}")
        return GENERIC_FAILURE_CODE

    try:
        outcome = ClickToRunDeployer(settings, request, log=log).run()
    except KeyboardInterrupt:
        log.error("Deployment cancelled")
        return GENERIC_FAILURE_CODE
    except Exception as e:
        log.error(f"Fatal error during deployment: {e}", exc_info=True)
        return GENERIC_FAILURE_CODE

    return outcome.exit_code


if __name__ == '__main__':
    sys.exit(main())
