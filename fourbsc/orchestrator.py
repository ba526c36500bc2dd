from dataclasses import dataclass
from enum import Enum
from typing import Optional
import asyncio

from .chain import SUBMIT_AGENT_SELECTOR, SUBMIT_REQUEST_SELECTOR, ChainSubmitter
from .config import Config
from .content import random_agent_description, random_agent_name, random_content, random_title
from .errors import AuthFailure, SessionExpired
from .executor import RequestExecutor
from .schemas import CreatedObject, TaskStatus, parse_score
from .session import SessionClient

STATUS_ALREADY_DONE = "Already Done"
STATUS_WORK_DONE = "Work Done"
STATUS_LOGIN_FAILED = "Login Failed"
STATUS_CHECK_FAILED = "Status Check Failed"
STATUS_SESSION_LOST = "Session Lost"

SETTLE_DELAY = 5

class State(Enum):
    LOGGING_IN = "logging_in"
    CHECKING_STATUS = "checking_status"
    REQUEST_ACTION = "request_action"
    AGENT_ACTION = "agent_action"
    FETCHING_SCORE = "fetching_score"
    DONE = "done"
    FAILED = "failed"

@dataclass
class ActionResult:
    api_ok: bool = False
    chain_ok: bool = False

    @property
    def performed(self):
        return self.api_ok and self.chain_ok

@dataclass
class CycleOutcome:
    success: bool
    status: str
    score: Optional[str] = None

    @classmethod
    def failed(cls, reason: str) -> "CycleOutcome":
        return cls(success=False, status=reason)

class TaskOrchestrator:
    """One account's daily cycle: login, status, two create + submit pairs, score."""

    def __init__(self, config: Config, client: SessionClient, submitter: ChainSubmitter, logger,
                 settle_delay=SETTLE_DELAY, request_backoff=3) -> None:
        self.config = config
        self.client = client
        self.submitter = submitter
        self.logger = logger
        self.settle_delay = settle_delay
        self.request_backoff = request_backoff
        self.state = State.LOGGING_IN
        self.executor = None

    async def run(self) -> CycleOutcome:
        try:
            return await self._run()
        finally:
            await self.client.close()

    def _fail(self, reason: str) -> CycleOutcome:
        self.state = State.FAILED
        return CycleOutcome.failed(reason)

    async def _run(self) -> CycleOutcome:
        endpoints = self.config.endpoints

        self.state = State.LOGGING_IN
        self.logger.info("Login", "Signing In...")
        try:
            session = await self.client.authenticate()
        except Exception as e:
            self.logger.error("Login", "Failed", str(e))
            return self._fail(STATUS_LOGIN_FAILED)
        self.logger.success("Login", "Success")

        self.executor = RequestExecutor(self.client, session, self.logger, backoff=self.request_backoff)

        self.state = State.CHECKING_STATUS
        try:
            status = TaskStatus.parse(await self.executor.execute("POST", endpoints.verify_status, {}))
        except Exception as e:
            self.logger.error("Tasks", "Status Check Failed", str(e))
            return self._fail(STATUS_CHECK_FAILED)

        if status.all_done:
            self.logger.success("Tasks", "All Done Today")
        else:
            self.logger.info(
                "Tasks",
                f"Request {'Done' if status.request_created else 'Pending'}, "
                f"Agent {'Done' if status.agent_created else 'Pending'}"
            )

        performed = 0
        try:
            self.state = State.REQUEST_ACTION
            if not status.request_created:
                result = await self.perform_request_action()
                performed += int(result.performed)

            self.state = State.AGENT_ACTION
            if not status.agent_created:
                result = await self.perform_agent_action()
                performed += int(result.performed)
        except (AuthFailure, SessionExpired) as e:
            self.logger.error("Session", "Lost", str(e))
            return self._fail(STATUS_SESSION_LOST)

        self.state = State.FETCHING_SCORE
        score = await self.fetch_score()

        self.state = State.DONE
        return CycleOutcome(
            success=True,
            status=STATUS_WORK_DONE if performed > 0 else STATUS_ALREADY_DONE,
            score=score
        )

    async def _create(self, field, path, body) -> Optional[CreatedObject]:
        try:
            created = CreatedObject.parse(await self.executor.execute("POST", path, body))
        except (AuthFailure, SessionExpired):
            raise
        except Exception as e:
            self.logger.error(field, "Create Failed", str(e))
            return None

        if not created.ok:
            self.logger.error(field, "Create Rejected", created.message or "Unknown Error")
            return None
        if created.object_id is None:
            self.logger.error(field, "Create Returned No Id")
            return None

        self.logger.success(field, "Created", f"Id {created.object_id}")
        return created

    async def perform_request_action(self) -> ActionResult:
        title = random_title()
        self.logger.info("Request", "Creating...", title)

        created = await self._create("Request", self.config.endpoints.create_request, {
            "title": title,
            "content": random_content(),
            "is_mobile": False
        })
        if created is None:
            return ActionResult()

        await asyncio.sleep(self.settle_delay)
        chain_ok = await self.submitter.submit(
            self.config.agent_contract, SUBMIT_REQUEST_SELECTOR,
            ["uint256", "string"], [created.object_id, title]
        )
        if chain_ok:
            self.logger.success("Request", "Completed")
        return ActionResult(api_ok=True, chain_ok=chain_ok)

    async def perform_agent_action(self) -> ActionResult:
        name = random_agent_name()
        description = random_agent_description()
        self.logger.info("Agent", "Creating...", name)

        created = await self._create("Agent", self.config.endpoints.create_agent, {
            "name": name,
            "tag": [0],
            "description": description
        })
        if created is None:
            return ActionResult()

        await asyncio.sleep(self.settle_delay)
        chain_ok = await self.submitter.submit(
            self.config.agent_contract, SUBMIT_AGENT_SELECTOR,
            ["uint256", "string", "string"], [created.object_id, name, description]
        )
        if chain_ok:
            self.logger.success("Agent", "Completed")
        return ActionResult(api_ok=True, chain_ok=chain_ok)

    async def fetch_score(self) -> Optional[str]:
        try:
            score = parse_score(await self.executor.execute("POST", self.config.endpoints.user_info, {}))
        except Exception as e:
            self.logger.warning("Points", "Unavailable", str(e))
            return None

        if score is None:
            self.logger.warning("Points", "Unavailable", "No Credit In Response")
        else:
            self.logger.info("Points", score)
        return score
