import json
from urllib.parse import unquote

import httpx
import pytest

from lunch_menus.core.config import Settings
from lunch_menus.store.db import MenuStore

LLM_URL = "https://llm.test/v1/chat/completions"
RENDER_HOST = "render.test"

DAY_TABS_HTML = """
<html><body>
<section class="daily-menu">
  <ul class="daily-menu-tab__list">
    <li class="daily-menu-tab__item"><span class="daily-menu-tab__day">Pondělí</span></li>
    <li class="daily-menu-tab__item"><span class="daily-menu-tab__day">Úterý</span></li>
  </ul>
  <div id="daily-menu-content-list">
    <div class="daily-menu-content__content">
      <div class="daily-menu-content__item">
        <h3 class="daily-menu-content__heading">Polévky</h3>
        <table><tbody>
          <tr><td>0,3 l</td><td>Česnečka se sýrem</td><td>45&nbsp;Kč</td></tr>
        </tbody></table>
      </div>
      <div class="daily-menu-content__item">
        <h3 class="daily-menu-content__heading">Hlavní jídla</h3>
        <table><tbody>
          <tr><td>150 g</td><td>Svíčková na smetaně,   knedlík</td><td>159 Kč</td></tr>
          <tr><td>200 g</td><td>Smažený sýr</td><td>cena dle dohody</td></tr>
        </tbody></table>
      </div>
    </div>
    <div class="daily-menu-content__content">
      <div class="daily-menu-content__item">
        <h3 class="daily-menu-content__heading">POLÉVKA</h3>
        <table><tr><td>0,3 l</td><td>Gulášová</td><td>49 Kč</td></tr></table>
      </div>
      <div class="daily-menu-content__item">
        <h3 class="daily-menu-content__heading">Dezert</h3>
        <table><tr><td>1 ks</td><td>Štrúdl</td><td>65 Kč</td></tr></table>
      </div>
    </div>
  </div>
</section>
</body></html>
"""

EXCEL_HTML = """
<html><body>
<h1>Jídelní lístek</h1>
<table>
  <tr><td>Polévky</td><td></td><td></td></tr>
  <tr><td></td><td>Zelňačka</td><td></td></tr>
  <tr><td>Denní nabídka</td><td></td><td></td></tr>
  <tr><td>1</td><td>Guláš</td><td>120</td></tr>
</table>
</body></html>
"""


def model_envelope(content: str) -> dict:
    return {"choices": [{"index": 0, "message": {"role": "assistant", "content": content}}]}


def long_text(words: int = 150) -> str:
    return " ".join(["Polední menu restaurace, guláš, řízek, polévka"] * (words // 6 + 1))


class FakeWeb:
    """
    Canned responses for restaurant pages, the remote render service and the
    language model API, behind an httpx.MockTransport.
    """

    def __init__(self):
        self.pages = {}
        self.rendered = {}
        self.model_status = 200
        self.model_body = model_envelope('{"poledni_nabidka": []}')
        self.model_requests = []
        self.render_requests = []
        self.page_requests = []

    def page(self, url: str, body: str, status: int = 200):
        self.pages[url] = (status, body)

    def render(self, url: str, text: str, status: int = 200):
        self.rendered[url] = (status, text)

    def model_answer(self, content: str):
        self.model_status = 200
        self.model_body = model_envelope(content)

    def model_reply(self, body: dict, status: int = 200):
        self.model_status = status
        self.model_body = body

    @property
    def model_calls(self) -> int:
        return len(self.model_requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == LLM_URL:
            self.model_requests.append(request)
            return httpx.Response(self.model_status, json=self.model_body)

        if request.url.host == RENDER_HOST:
            target = unquote(request.url.raw_path.decode()[1:])
            self.render_requests.append(target)
            status, text = self.rendered.get(target, (502, "render failed"))
            return httpx.Response(status, text=text)

        url = str(request.url)
        self.page_requests.append(url)
        if url in self.pages:
            status, body = self.pages[url]
            return httpx.Response(status, text=body, headers={"Content-Type": "text/html; charset=utf-8"})
        return httpx.Response(404, text="Not found")

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def settings(tmp_path):
    """Settings pointing every external service at the fake web"""
    return Settings(
        DATABASE_PATH=str(tmp_path / "menus.sqlite"),
        LLM_API_KEY="test-key",
        LLM_API_URL=LLM_URL,
        REMOTE_RENDER_URL_TEMPLATE=f"https://{RENDER_HOST}/{{url}}",
        REQUEST_TIMEOUT=5,
        BATCH_TIMEOUT_SECONDS=30,
        BATCH_CONCURRENCY=2,
    )


@pytest.fixture
def web():
    return FakeWeb()


@pytest.fixture
def store(settings):
    menu_store = MenuStore(settings.DATABASE_PATH)
    menu_store.init_db()
    return menu_store
