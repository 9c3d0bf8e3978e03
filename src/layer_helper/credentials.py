"""
layer_helper.credentials — Credential Gate.

State machine:

    UNCHECKED --probe ok--> AUTHENTICATED
    UNCHECKED --probe fails--> UNAUTHENTICATED_RETRYING
    UNAUTHENTICATED_RETRYING --configure + probe ok--> AUTHENTICATED
    UNAUTHENTICATED_RETRYING --configure + probe fails, operator continues--> (self)
    UNAUTHENTICATED_RETRYING --configure + probe fails, operator declines--> ABORTED

The loop has no retry cap; every extra iteration needs an explicit "yes".
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from layer_helper.cloud import CloudClient
from layer_helper.console import OutputFn, announce, ask_yes_no, echo
from layer_helper.exceptions import UserAborted

logger = logging.getLogger("layer_helper.credentials")

DecideFn = Callable[[], bool]


class GateState(StrEnum):
    UNCHECKED = "unchecked"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED_RETRYING = "unauthenticated-retrying"
    ABORTED = "aborted"


def ask_to_continue() -> bool:
    return ask_yes_no("Do you want to proceed?")


class CredentialGate:
    def __init__(
        self,
        cloud: CloudClient,
        *,
        decide: DecideFn = ask_to_continue,
        output: OutputFn = echo,
    ) -> None:
        self._cloud = cloud
        self._decide = decide
        self._output = output
        self.state = GateState.UNCHECKED
        self.history: list[GateState] = [GateState.UNCHECKED]
        self.attempts = 0

    def _transition(self, state: GateState) -> None:
        logger.debug("Credential gate %s -> %s", self.state, state)
        self.state = state
        self.history.append(state)

    def _probe(self) -> bool:
        self.attempts += 1
        result = self._cloud.probe()
        if result.authenticated:
            announce("AWS S3 LS command returned a valid response:", output=self._output)
            self._output(result.output)
            return True
        announce("AWS S3 LS command did not return a valid response.", output=self._output)
        if result.error:
            self._output(result.error)
        return False

    def _configure(self) -> None:
        announce("Configuring AWS CLI", output=self._output)
        result = self._cloud.configure()
        if result.ok:
            announce("AWS CLI configuration completed successfully.", output=self._output)
        else:
            announce(
                "AWS CLI configuration failed. Please check your input and try again.",
                output=self._output,
            )

    def run(self) -> GateState:
        """Block until credentials work or the operator gives up.

        Returns AUTHENTICATED; raises UserAborted when the operator declines.
        """
        if self.state is GateState.AUTHENTICATED:
            return self.state

        if self._probe():
            self._transition(GateState.AUTHENTICATED)
            return self.state

        self._transition(GateState.UNAUTHENTICATED_RETRYING)
        while True:
            self._configure()
            if self._probe():
                self._transition(GateState.AUTHENTICATED)
                return self.state

            announce("The AWS credentials may still not be correct.", output=self._output)
            if not self._decide():
                self._transition(GateState.ABORTED)
                raise UserAborted("Credential configuration abandoned by operator")
            logger.info("Operator chose to retry credential configuration")
