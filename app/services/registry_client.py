# app/services/registry_client.py
import socket
import threading

import requests
from requests import RequestException

from app.utils.retry import http_retry
from app.utils.settings import (
    APP_NAME,
    EUREKA_URL,
    INSTANCE_HOST,
    PORT,
    REGISTRY_HEARTBEAT_SECONDS,
)
from app.utils.logging import get_logger

logger = get_logger(__name__)

_DATA_CENTER_CLASS = "com.netflix.appinfo.InstanceInfo$DefaultDataCenterInfo"


class RegistryClient:
    """
    Cliente REST do Eureka (v2):
    - POST   /apps/{APP}            registro
    - PUT    /apps/{APP}/{id}       heartbeat
    - DELETE /apps/{APP}/{id}       cancelamento
    """

    def __init__(
        self,
        base_url: str | None = None,
        app_name: str = APP_NAME,
        host: str = INSTANCE_HOST,
        port: int = PORT,
        timeout: int = 2,
    ):
        self.base_url = (base_url or EUREKA_URL).rstrip("/")
        self.app_name = app_name.upper()
        self.host = host
        self.port = port
        self.timeout = timeout
        self.instance_id = f"{host}:{app_name.lower()}:{port}"

    @property
    def app_url(self) -> str:
        return f"{self.base_url}/apps/{self.app_name}"

    @property
    def instance_url(self) -> str:
        return f"{self.app_url}/{self.instance_id}"

    def instance_payload(self) -> dict:
        home = f"http://{self.host}:{self.port}"
        return {
            "instance": {
                "instanceId": self.instance_id,
                "hostName": self.host,
                "app": self.app_name,
                "ipAddr": _resolve_ip(self.host),
                "vipAddress": self.app_name.lower(),
                "secureVipAddress": self.app_name.lower(),
                "status": "UP",
                "port": {"$": self.port, "@enabled": "true"},
                "securePort": {"$": 443, "@enabled": "false"},
                "homePageUrl": f"{home}/",
                "statusPageUrl": f"{home}/health",
                "healthCheckUrl": f"{home}/health",
                "dataCenterInfo": {"@class": _DATA_CENTER_CLASS, "name": "MyOwn"},
            }
        }

    @http_retry()
    def register(self) -> None:
        logger.info(f"RegistryClient POST {self.app_url} ({self.instance_id})")
        resp = requests.post(
            self.app_url,
            json=self.instance_payload(),
            headers={"Accept": "application/json"},
            timeout=self.timeout,
        )
        resp.raise_for_status()

    @http_retry()
    def heartbeat(self) -> bool:
        """False quando o Eureka nao conhece a instancia (precisa registrar de novo)."""
        resp = requests.put(self.instance_url, timeout=self.timeout)
        if resp.status_code == 404:
            return False
        resp.raise_for_status()
        return True

    @http_retry()
    def deregister(self) -> None:
        logger.info(f"RegistryClient DELETE {self.instance_url}")
        resp = requests.delete(self.instance_url, timeout=self.timeout)
        resp.raise_for_status()


def _resolve_ip(host: str) -> str:
    try:
        return socket.gethostbyname(host)
    except OSError:
        return "127.0.0.1"


class RegistryAgent:
    """
    Mantem o registro vivo numa thread em background:
    registra, renova a cada `interval` segundos e cancela no stop().
    """

    def __init__(self, client: RegistryClient, interval: float = REGISTRY_HEARTBEAT_SECONDS):
        self.client = client
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self.registered = False
        # True desde a primeira tentativa de register: o Eureka pode ter
        # gravado a instancia mesmo sem a resposta ter chegado aqui
        self.register_attempted = False

    @property
    def join_timeout(self) -> float:
        # register com retry: 3 tentativas de `timeout` s + backoff (0.3 + 0.6)
        return self.client.timeout * 3 + 2

    def start(self) -> None:
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="eureka-heartbeat", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Bloqueante: chamar fora do event loop."""
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=self.join_timeout)
            if self._thread.is_alive():
                logger.warning("Thread de heartbeat do Eureka nao terminou a tempo")

        if self.register_attempted:
            try:
                self.client.deregister()
            except RequestException as e:
                logger.warning(f"Falha ao cancelar registro no Eureka: {e}")
        self.registered = False
        self.register_attempted = False

    def tick(self) -> None:
        """Um ciclo: registra se preciso, senao envia heartbeat."""
        if self._stop.is_set():
            return
        try:
            if not self.registered:
                self.register_attempted = True
                self.client.register()
                self.registered = True
                logger.info(f"Instancia {self.client.instance_id} registrada no Eureka")
            elif not self.client.heartbeat():
                logger.warning("Eureka nao reconhece a instancia, registrando novamente")
                self.registered = False
                self.tick()
        except RequestException as e:
            # proxima tentativa no proximo ciclo
            self.registered = False
            logger.warning(f"Eureka indisponivel: {e}")

    def _run(self) -> None:
        self.tick()
        while not self._stop.wait(self.interval):
            self.tick()
