from datetime import date
import httpx
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type
from app.core.config import BACKEND_URL, BACKEND_API_KEY
from app.utils.formatters import clean_ai_markdown
from app.utils.mappers import build_job_post_row, build_profile_row
from app.utils.validators import parse_int
from typing import Dict, Any, List, Optional
import logging

logger = logging.getLogger(__name__)

class APIRequestError(Exception):
    """Базовый exception для API ошибок."""
    pass

class APIHTTPError(APIRequestError):
    """HTTP-ошибка от API."""
    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)

class APINetworkError(APIRequestError):
    """Сетевая ошибка (timeout, connection)."""
    pass

def serialize_dates(obj: Any) -> Any:
    """Сериализация дат в ISO формат."""
    if isinstance(obj, date):
        return obj.isoformat()
    elif isinstance(obj, dict):
        return {key: serialize_dates(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [serialize_dates(item) for item in obj]
    return obj

def retry_api_call():
    """Retry только для чтения: записи и вызовы функций не повторяются."""
    return retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(APINetworkError),
        reraise=True
    )

def _eq_filters(filters: Dict[str, Any]) -> Dict[str, str]:
    return {key: f"eq.{value}" for key, value in filters.items()}

class BackendAPIClient:
    """Клиент backend-as-a-service: таблицы, файловое хранилище, функции."""
    def __init__(self, base_url: str = BACKEND_URL, api_key: str = BACKEND_API_KEY,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(10.0, connect=5.0)
        self.function_timeout = httpx.Timeout(60.0, connect=5.0)
        self.auth_headers = {"apikey": api_key, "Authorization": f"Bearer {api_key}"}
        self.headers = {**self.auth_headers, "Content-Type": "application/json"}
        self._transport = transport

    async def _request(self, method: str, path: str, timeout: Optional[httpx.Timeout] = None, **kwargs: Any) -> httpx.Response:
        async with httpx.AsyncClient(
            http2=False, trust_env=False, timeout=timeout or self.timeout, transport=self._transport
        ) as client:
            try:
                response = await client.request(method, f"{self.base_url}{path}", **kwargs)
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                raise APIHTTPError(e.response.status_code, f"HTTP error: {e.response.text}")
            except httpx.RequestError as e:
                raise APINetworkError(f"Network error: {str(e)}")

    @retry_api_call()
    async def select_rows(self, table: str, filters: Dict[str, Any], limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Выборка строк таблицы по равенству полей."""
        params = {"select": "*", **_eq_filters(filters)}
        if limit:
            params["limit"] = str(limit)
        response = await self._request("GET", f"/rest/v1/{table}", params=params, headers=self.headers)
        return response.json()

    async def insert_row(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        """Вставка строки."""
        headers = {**self.headers, "Prefer": "return=representation"}
        response = await self._request("POST", f"/rest/v1/{table}", json=serialize_dates(row), headers=headers)
        data = response.json()
        return data[0] if isinstance(data, list) and data else data

    async def upsert_row(self, table: str, row: Dict[str, Any], on_conflict: str) -> Dict[str, Any]:
        """Вставка или обновление строки по уникальному полю."""
        headers = {**self.headers, "Prefer": "resolution=merge-duplicates,return=representation"}
        response = await self._request(
            "POST", f"/rest/v1/{table}", params={"on_conflict": on_conflict},
            json=serialize_dates(row), headers=headers
        )
        data = response.json()
        return data[0] if isinstance(data, list) and data else data

    async def update_rows(self, table: str, filters: Dict[str, Any], values: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Обновление строк по равенству полей."""
        headers = {**self.headers, "Prefer": "return=representation"}
        response = await self._request(
            "PATCH", f"/rest/v1/{table}", params=_eq_filters(filters),
            json=serialize_dates(values), headers=headers
        )
        return response.json()

    async def upload_file(self, bucket: str, path: str, file_data: bytes, content_type: str) -> str:
        """Загрузка файла в хранилище. Возвращает путь объекта."""
        headers = {**self.auth_headers, "Content-Type": content_type, "x-upsert": "true"}
        await self._request("POST", f"/storage/v1/object/{bucket}/{path}", content=file_data, headers=headers)
        logger.info(f"Uploaded {len(file_data)} bytes to {bucket}/{path}")
        return f"{bucket}/{path}"

    async def invoke_function(self, name: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Вызов удалённой функции."""
        response = await self._request(
            "POST", f"/functions/v1/{name}", json=serialize_dates(body),
            headers=self.headers, timeout=self.function_timeout
        )
        return response.json()

    async def get_profile_by_telegram_id(self, telegram_id: int) -> Optional[Dict[str, Any]]:
        """Получение профиля по telegram_id."""
        rows = await self.select_rows("profiles", {"telegram_id": telegram_id}, limit=1)
        if not rows:
            logger.info(f"BackendAPI: profile for telegram_id {telegram_id} not found.")
            return None
        return rows[0]

    async def save_cv_profile(self, telegram_id: int, form_data: Dict[str, Any]) -> Dict[str, Any]:
        """Сохранение профиля из мастера резюме."""
        row = build_profile_row(telegram_id, form_data)
        result = await self.upsert_row("profiles", row, on_conflict="telegram_id")
        logger.info(f"Saved CV profile for telegram_id {telegram_id}")
        return result

    async def update_profile_layout(self, telegram_id: int, layout: int) -> bool:
        """Сохранение выбранного макета в профиле."""
        rows = await self.update_rows("profiles", {"telegram_id": telegram_id}, {"layout": layout})
        if rows:
            logger.info(f"Updated layout to {layout} for telegram_id {telegram_id}")
        return bool(rows)

    async def get_company_by_owner(self, telegram_id: int) -> Optional[Dict[str, Any]]:
        """Компания, принадлежащая пользователю."""
        rows = await self.select_rows("companies", {"owner_telegram_id": telegram_id}, limit=1)
        return rows[0] if rows else None

    async def create_job_post(self, company_id: str, form_data: Dict[str, Any], publish: bool) -> Dict[str, Any]:
        """Создание вакансии (черновик или публикация)."""
        row = build_job_post_row(company_id, form_data, publish)
        result = await self.insert_row("job_posts", row)
        logger.info(f"Created job post for company {company_id}, published={publish}")
        return result

    async def suggest_skills(self, form_data: Dict[str, Any]) -> List[str]:
        """Подбор навыков по профилю."""
        data = await self.invoke_function("ai-suggest-skills", {
            "branche": form_data.get("branche"),
            "status": form_data.get("status"),
            "existingSkills": form_data.get("faehigkeiten") or [],
            "schulbildung": form_data.get("schulbildung") or [],
            "berufserfahrung": form_data.get("berufserfahrung") or [],
        })
        if not data.get("success"):
            logger.warning(f"ai-suggest-skills returned no success flag: {data}")
            return []
        return [s.strip() for s in data.get("skills") or [] if isinstance(s, str) and s.strip()]

    async def generate_job_description(self, form_data: Dict[str, Any], industry: Optional[str] = None) -> Dict[str, str]:
        """Генерация текстов вакансии."""
        data = await self.invoke_function("ai-generate-job-description", {
            "jobData": {
                "title": form_data.get("title"),
                "industry": industry,
                "city": form_data.get("city"),
                "employment_type": form_data.get("employment_type"),
                "skills": form_data.get("skills") or [],
                "languages": form_data.get("required_languages") or [],
            }
        })
        generated = {
            key: clean_ai_markdown(data.get(key) or "")
            for key in ("description_md", "tasks_md", "requirements_md", "benefits_description")
        }
        return {key: value for key, value in generated.items() if value}

    async def suggest_salary(self, form_data: Dict[str, Any]) -> Dict[str, int]:
        """Подсказка диапазона зарплаты."""
        data = await self.invoke_function("ai-suggest-salary", {
            "title": form_data.get("title"),
            "city": form_data.get("city"),
            "employment_type": form_data.get("employment_type"),
            "working_hours": form_data.get("working_hours"),
        })
        suggestion = {key: parse_int(data.get(key)) for key in ("salary_min", "salary_max")}
        return {key: value for key, value in suggestion.items() if value is not None}

backend_api_client = BackendAPIClient()
