"""
Movies API client

Thin wrapper over requests for scripts and other services that talk to the
Movies API.

Usage:
    client = MoviesApiClient("http://localhost:8000", token_provider=lambda: my_token)
    movie = client.get_movie("the-matrix-1999")
    page = client.get_movies(sort_by="-yearofrelease", page_size=5)
"""

import logging
from typing import Callable, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class MoviesApiClient:
    def __init__(
        self,
        base_url: str,
        token_provider: Optional[Callable[[], str]] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10,
    ):
        self.base_url = base_url.rstrip("/")
        self.token_provider = token_provider
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """
        Send a request to the API.

        Args:
            method: HTTP method
            endpoint: Path below the base URL (e.g., "/api/movies")

        Returns:
            The response; callers decide how to treat 404
        """
        headers = kwargs.pop("headers", {})
        if self.token_provider is not None:
            headers["Authorization"] = f"Bearer {self.token_provider()}"

        url = f"{self.base_url}{endpoint}"
        response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        logger.debug(f"{method} {endpoint} -> {response.status_code}")
        return response

    def _found(self, response: requests.Response) -> bool:
        """False on 404, raises on any other error status"""
        if response.status_code == 404:
            return False
        response.raise_for_status()
        return True

    def get_movie(self, id_or_slug: str) -> Optional[Dict]:
        response = self._request("GET", f"/api/movies/{id_or_slug}")
        return response.json() if self._found(response) else None

    def get_movies(
        self,
        title: Optional[str] = None,
        year: Optional[int] = None,
        sort_by: Optional[str] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> Dict:
        params = {"title": title, "year": year, "sortBy": sort_by, "page": page, "pageSize": page_size}
        response = self._request(
            "GET", "/api/movies", params={k: v for k, v in params.items() if v is not None}
        )
        response.raise_for_status()
        return response.json()

    def create_movie(self, title: str, year_of_release: int, genres: List[str]) -> Dict:
        response = self._request(
            "POST",
            "/api/movies",
            json={"title": title, "year_of_release": year_of_release, "genres": genres},
        )
        response.raise_for_status()
        return response.json()

    def update_movie(self, movie_id: str, title: str, year_of_release: int, genres: List[str]) -> Optional[Dict]:
        response = self._request(
            "PUT",
            f"/api/movies/{movie_id}",
            json={"title": title, "year_of_release": year_of_release, "genres": genres},
        )
        return response.json() if self._found(response) else None

    def delete_movie(self, movie_id: str) -> bool:
        return self._found(self._request("DELETE", f"/api/movies/{movie_id}"))

    def rate_movie(self, movie_id: str, rating: int) -> bool:
        return self._found(self._request("PUT", f"/api/movies/{movie_id}/ratings", json={"rating": rating}))

    def delete_rating(self, movie_id: str) -> bool:
        return self._found(self._request("DELETE", f"/api/movies/{movie_id}/ratings"))

    def get_user_ratings(self) -> List[Dict]:
        response = self._request("GET", "/api/ratings/me")
        response.raise_for_status()
        return response.json()["items"]


if __name__ == "__main__":
    import json
    import os
    import sys

    token = os.getenv("MOVIES_API_TOKEN")
    client = MoviesApiClient(
        os.getenv("MOVIES_API_URL", "http://localhost:8000"),
        token_provider=(lambda: token) if token else None,
    )
    target = sys.argv[1] if len(sys.argv) > 1 else None
    result = client.get_movie(target) if target else client.get_movies(page_size=3)
    print(json.dumps(result, indent=2))
