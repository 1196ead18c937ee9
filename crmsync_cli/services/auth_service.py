"""
Authentication Service

Exchanges environment credentials for a B2C Commerce bearer token.
"""

from crmsync_cli.constants import ENV_VAR_MAP, GRANT_BM_USER, GRANT_CLIENT_CREDENTIALS
from crmsync_cli.exceptions import AuthenticationError
from crmsync_cli.models.deployment import AuthToken
from crmsync_cli.models.environment import AuthMode
from crmsync_cli.services.b2c_client import B2CClient, response_payload


class Authenticator:
    """
    Obtains an access token in one outbound call.

    Missing credentials are reported before any request is made; no
    retries happen here.
    """

    def __init__(self, client: B2CClient, mode: AuthMode = AuthMode.CLIENT_CREDENTIALS):
        self.client = client
        self.mode = mode

    def check_credentials(self) -> None:
        missing = self.client.environment.missing(*self.mode.required_properties)
        if missing:
            raise AuthenticationError(
                f"missing credentials for {self.mode.value} authentication",
                context=", ".join(ENV_VAR_MAP[name] for name in missing),
            )

    async def authenticate(self) -> AuthToken:
        self.check_credentials()
        env = self.client.environment

        if self.mode is AuthMode.BM_USER:
            url = f"{self.client.base_url}/dw/oauth2/access_token"
            response = await self.client.request(
                "POST",
                url,
                AuthenticationError,
                params={"client_id": env.b2c_client_id},
                auth=(f"{env.b2c_username}:{env.b2c_access_key}", env.b2c_client_secret),
                data={"grant_type": GRANT_BM_USER},
            )
        else:
            response = await self.client.request(
                "POST",
                self.client.settings.b2c.account_manager_url,
                AuthenticationError,
                auth=(env.b2c_client_id, env.b2c_client_secret),
                data={"grant_type": GRANT_CLIENT_CREDENTIALS},
            )

        payload = response_payload(response)
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise AuthenticationError(
                "token response did not include an access_token",
                status_code=response.status_code,
                payload=payload,
            )
        return AuthToken.from_response(payload)
