# anonchat/services/verification_service.py

import logging
import requests

logger = logging.getLogger(__name__)

DEFAULT_VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class RecaptchaVerifier:
    """
    Проверка человека через Google reCAPTCHA (siteverify).
    Выполняется вне замка матчмейкинга: это единственная операция
    с сетевым вводом-выводом.
    """

    def __init__(self, secret_key: str = "", verify_url: str = DEFAULT_VERIFY_URL,
                 timeout: float = 8, require_secret: bool = False):
        self.secret_key = secret_key or ""
        self.verify_url = verify_url or DEFAULT_VERIFY_URL
        self.timeout = timeout
        self.require_secret = require_secret

    @classmethod
    def from_config(cls, config):
        return cls(
            secret_key=config.get('RECAPTCHA_SECRET_KEY', ""),
            verify_url=config.get('RECAPTCHA_VERIFY_URL', DEFAULT_VERIFY_URL),
            timeout=config.get('RECAPTCHA_TIMEOUT_SECONDS', 8),
            require_secret=config.get('REQUIRE_RECAPTCHA', False),
        )

    def verify(self, token) -> bool:
        token = str(token or "").strip()

        if not self.secret_key:
            if self.require_secret:
                logger.warning("[Captcha] RECAPTCHA_SECRET_KEY не задан, а проверка обязательна. Отказ.")
                return False
            logger.warning("[Captcha] RECAPTCHA_SECRET_KEY не задан, проверка пропущена (режим разработки).")
            return True

        if not token:
            logger.warning("[Captcha] Токен reCAPTCHA отсутствует.")
            return False

        try:
            response = requests.post(
                self.verify_url,
                data={"secret": self.secret_key, "response": token},
                timeout=self.timeout
            )
            if response.status_code != 200:
                logger.warning(f"[Captcha] siteverify вернул HTTP {response.status_code}: {response.text[:300]}")
                return False

            result = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"[Captcha] Ошибка проверки reCAPTCHA: {e}")
            return False

        ok = bool(result.get("success", False))
        if not ok:
            logger.warning(f"[Captcha] reCAPTCHA отклонил токен: codes={result.get('error-codes', [])}")
        return ok
