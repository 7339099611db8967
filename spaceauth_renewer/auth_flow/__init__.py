"""Auth flow: protocol and the fastlane spaceauth driver."""

from spaceauth_renewer.auth_flow.protocol import AuthFlow, CodeProvider
from spaceauth_renewer.auth_flow.spaceauth import SpaceauthFlow, build_child_env

__all__ = [
    "AuthFlow",
    "CodeProvider",
    "SpaceauthFlow",
    "build_child_env",
]
