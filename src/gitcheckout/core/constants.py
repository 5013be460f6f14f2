"""Well-known git configuration keys, environment variables and values."""
from __future__ import annotations

# Repository-local marker recording which strategy configured the checkout.
GIT_CREDENTIAL_AUTH_HELPER = "checkout.authHelper"
# ssh-agent started by the SSH strategy, stopped by whichever process cleans up.
CHECKOUT_SSH_AGENT_PID = "checkout.sshAgentPid"
CHECKOUT_SSH_AUTH_SOCK = "checkout.sshAuthSock"
# Repository-local section holding pre-existing values of keys we overwrite.
BACKUP_SECTION = "checkout-backup"

GIT_CREDENTIAL_HELPER = "credential.helper"
GIT_CREDENTIAL_TASKID = "credential.taskId"
GIT_CREDENTIAL_HELPER_VALUE_REGEX = "git-checkout-credential"
GIT_CORE_ASKPASS = "core.askpass"
GIT_INSTEADOF_REGEX = r"^url\..*\.insteadof$"

ORIGIN_REMOTE_NAME = "origin"
DEVOPS_VIRTUAL_REMOTE_NAME = "devops-virtual-origin"

OAUTH2 = "oauth2"
HTTP_PROTOCOLS = ("https", "http")

# Environment
HOME = "HOME"
XDG_CONFIG_HOME = "XDG_CONFIG_HOME"
GIT_ASKPASS = "GIT_ASKPASS"
GIT_SSH_COMMAND = "GIT_SSH_COMMAND"
GIT_SSH_COMMAND_VALUE = "ssh -o StrictHostKeyChecking=no"
GIT_TERMINAL_PROMPT = "GIT_TERMINAL_PROMPT"
SSH_AUTH_SOCK = "SSH_AUTH_SOCK"
SSH_AGENT_PID = "SSH_AGENT_PID"
BK_CI_PIPELINE_ID = "BK_CI_PIPELINE_ID"
BK_CI_BUILD_JOB_ID = "BK_CI_BUILD_JOB_ID"
BK_CI_BUILD_TASK_ID = "BK_CI_BUILD_TASK_ID"
BK_CI_BUILD_TYPE = "BK_CI_BUILD_TYPE"
DEVOPS_SLAVE_ENVIRONMENT = "DEVOPS_SLAVE_ENVIRONMENT"
CREDENTIAL_STORE_ENV = "GIT_CHECKOUT_CREDENTIAL_STORE"

# Credential program
CREDENTIAL_SHELL_FILE_NAME = "git-checkout-credential.sh"
CREDENTIAL_STORE_FILE_NAME = "credentials.json"
DEVOPS_URI = "https://mock.devops.com"


def task_uri(task_id: str) -> str:
    """Pseudo-URI under which a single task's credential is stored."""
    return f"https://{task_id}.mock.devops.com"


__all__ = [
    "GIT_CREDENTIAL_AUTH_HELPER",
    "CHECKOUT_SSH_AGENT_PID",
    "CHECKOUT_SSH_AUTH_SOCK",
    "BACKUP_SECTION",
    "GIT_CREDENTIAL_HELPER",
    "GIT_CREDENTIAL_TASKID",
    "GIT_CREDENTIAL_HELPER_VALUE_REGEX",
    "GIT_CORE_ASKPASS",
    "GIT_INSTEADOF_REGEX",
    "ORIGIN_REMOTE_NAME",
    "DEVOPS_VIRTUAL_REMOTE_NAME",
    "OAUTH2",
    "HTTP_PROTOCOLS",
    "HOME",
    "XDG_CONFIG_HOME",
    "GIT_ASKPASS",
    "GIT_SSH_COMMAND",
    "GIT_SSH_COMMAND_VALUE",
    "GIT_TERMINAL_PROMPT",
    "SSH_AUTH_SOCK",
    "SSH_AGENT_PID",
    "BK_CI_PIPELINE_ID",
    "BK_CI_BUILD_JOB_ID",
    "BK_CI_BUILD_TASK_ID",
    "BK_CI_BUILD_TYPE",
    "DEVOPS_SLAVE_ENVIRONMENT",
    "CREDENTIAL_STORE_ENV",
    "CREDENTIAL_SHELL_FILE_NAME",
    "CREDENTIAL_STORE_FILE_NAME",
    "DEVOPS_URI",
    "task_uri",
]
