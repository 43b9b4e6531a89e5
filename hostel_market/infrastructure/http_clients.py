import httpx
import logging
from typing import Optional

from hostel_market.domain.models import Identity, UserRole
from hostel_market.domain.exceptions import IdentityServiceError
from hostel_market.application.interfaces import IdentityProvider

logger = logging.getLogger(__name__)


class HTTPIdentityClient(IdentityProvider):
    """Клиент внешнего сервиса авторизации.

    Сервис по bearer-токену возвращает пользователя {id, email, name, role}.
    Флаг администратора выставляется по совпадению email с ADMIN_EMAIL.
    """

    def __init__(self, base_url: str, api_token: str, admin_email: str = "", transport: Optional[httpx.AsyncBaseTransport] = None):
        self._base_url = base_url
        self._api_token = api_token
        self._admin_email = admin_email
        self._transport = transport

    async def get_identity(self, token: str) -> Optional[Identity]:
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(
                    f"{self._base_url}/api/user",
                    headers={
                        "Authorization": f"Bearer {token}",
                        "X-API-Key": self._api_token
                    },
                    timeout=10.0
                )

                if response.status_code == 200:
                    return self._to_identity(response)
                elif response.status_code in (401, 404):
                    return None
                else:
                    raise IdentityServiceError(f"Identity service ошибка: {response.status_code}")

        except httpx.RequestError as e:
            logger.error(f"Identity service ошибка подключения: {e}")
            raise IdentityServiceError(f"Identity service не доступен: {str(e)}")

    def _to_identity(self, response: httpx.Response) -> Identity:
        try:
            data = response.json()
            email = data["email"]
            return Identity(
                user_id=str(data["id"]),
                email=email,
                name=data.get("name") or email,
                role=UserRole(data.get("role") or UserRole.BUYER.value),
                is_admin=bool(self._admin_email) and email == self._admin_email
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Identity service вернул некорректный ответ: {e}")
            raise IdentityServiceError(f"Некорректный ответ identity service: {e}")
