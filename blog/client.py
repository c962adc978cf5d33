# blog/client.py

"""
Типизированный HTTP-клиент для Blog API.

Один объект хранит базовый URL, HTTP-сессию и текущий токен.
Мутирующие методы возвращают запись, которую вернул сервер,
а не то, что клиент отправлял.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Optional, Tuple, Union

import requests

from blog.schemas import Comment, Post, UserResponse

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000/api/v1"


class ClientError(Exception):
    """Базовая ошибка клиента"""


class TransportError(ClientError):
    """Сервер недоступен или соединение оборвалось"""


class ApiError(ClientError):
    """Сервер ответил ошибкой (4xx/5xx)"""

    def __init__(self, status_code: int, detail: str, code: Optional[str] = None):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail
        self.code = code


class BlogClient:

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        timeout: float = 10.0,
        session=None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.refresh_token: Optional[str] = None
        self.user: Optional[UserResponse] = None
        self.timeout = timeout
        # session - requests.Session или совместимый клиент
        self._session = session or requests.Session()

    # =================
    # ТРАНСПОРТ
    # =================

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, endpoint: str, json=None, params=None):
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._session.request(
                method,
                url,
                json=json,
                params=params,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise TransportError(str(exc)) from exc

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            raise ApiError(
                response.status_code,
                body.get("detail", "Request failed"),
                body.get("code"),
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def _remember_session(self, data: dict) -> UserResponse:
        self.token = data["access_token"]
        self.refresh_token = data.get("refresh_token")
        self.user = UserResponse.model_validate(data["user"])
        return self.user

    # =================
    # AUTH
    # =================

    def login(self, email: str, password: str) -> UserResponse:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        return self._remember_session(data)

    def register(self, username: str, email: str, password: str) -> UserResponse:
        data = self._request(
            "POST",
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        return self._remember_session(data)

    def verify(self) -> Optional[UserResponse]:
        """Пользователь по текущему токену или None, если токен невалиден"""
        if not self.token:
            return None
        try:
            return UserResponse.model_validate(self._request("GET", "/auth/verify"))
        except ApiError as exc:
            if exc.status_code == 401:
                return None
            raise

    def logout(self) -> None:
        if self.refresh_token:
            self._request("POST", "/auth/logout", json={"refresh_token": self.refresh_token})
        self.token = None
        self.refresh_token = None
        self.user = None

    # =================
    # POSTS
    # =================

    def list_posts(self, q: Optional[str] = None, tag: Optional[str] = None) -> List[Post]:
        params = {key: value for key, value in (("q", q), ("tag", tag)) if value}
        data = self._request("GET", "/posts", params=params or None)
        return [Post.model_validate(item) for item in data]

    def get_post(self, post_id: str) -> Optional[Post]:
        try:
            return Post.model_validate(self._request("GET", f"/posts/{post_id}"))
        except ApiError as exc:
            if exc.status_code == 404:
                return None
            raise

    def create_post(
        self,
        title: str,
        content: str,
        excerpt: Optional[str] = None,
        tags: Union[List[str], str, None] = None,
    ) -> Post:
        payload = {"title": title, "content": content, "excerpt": excerpt, "tags": tags or []}
        return Post.model_validate(self._request("POST", "/posts", json=payload))

    def update_post(
        self,
        post_id: str,
        expected_updated_at: Optional[datetime] = None,
        **fields,
    ) -> Optional[Post]:
        """
        Обновить поля поста (title, content, excerpt, tags).
        None -> поста нет.
        """
        payload = dict(fields)
        if expected_updated_at is not None:
            payload["expectedUpdatedAt"] = expected_updated_at.isoformat()
        try:
            return Post.model_validate(self._request("PUT", f"/posts/{post_id}", json=payload))
        except ApiError as exc:
            if exc.status_code == 404:
                return None
            raise

    def delete_post(self, post_id: str) -> bool:
        try:
            self._request("DELETE", f"/posts/{post_id}")
        except ApiError as exc:
            if exc.status_code == 404:
                return False
            raise
        return True

    # =================
    # COMMENTS
    # =================

    def list_comments(self, post_id: str) -> List[Comment]:
        data = self._request("GET", f"/comments/{post_id}")
        return [Comment.model_validate(item) for item in data]

    def add_comment(self, post_id: str, text: str) -> Comment:
        data = self._request("POST", f"/comments/{post_id}", json={"text": text})
        return Comment.model_validate(data)

    def add_reply(self, post_id: str, comment_id: str, text: str) -> Comment:
        data = self._request(
            "POST",
            f"/comments/{post_id}/{comment_id}/replies",
            json={"text": text},
        )
        return Comment.model_validate(data)

    def get_post_with_comments(self, post_id: str) -> Tuple[Optional[Post], List[Comment]]:
        """
        Пост и его комментарии двумя параллельными запросами.
        """
        with ThreadPoolExecutor(max_workers=2) as pool:
            post_future = pool.submit(self.get_post, post_id)
            comments_future = pool.submit(self.list_comments, post_id)
            return post_future.result(), comments_future.result()

    def close(self) -> None:
        close = getattr(self._session, "close", None)
        if close is not None:
            close()
