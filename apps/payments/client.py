# apps/payments/client.py

"""
Checkout-side helpers for talking to the storefront API.

``OrderStatusPoller`` watches an order until its payment is approved and
then sends the customer to the success page. ``PaymentSubmitter`` makes
sure one click on the payment widget produces one payment request, even
when the widget fires its submit callback several times.

Timing goes through a ``Scheduler`` so tests can drive the clock by hand.
"""

import threading
from abc import ABC, abstractmethod

import requests
import structlog

from apps.orders.enums import PaymentStatus

logger = structlog.get_logger(__name__)

SUCCESS_PATH = "/checkout/sucesso/{order_id}"


class Scheduler(ABC):
    """Runs callbacks after a delay, in seconds."""

    @abstractmethod
    def call_later(self, delay, callback):
        """Schedule ``callback``; return a handle with a ``cancel()`` method."""


class ThreadingScheduler(Scheduler):
    def call_later(self, delay, callback):
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class StorefrontClient:
    """
    Minimal HTTP client for the endpoints the checkout page uses.
    """

    def __init__(self, base_url, timeout=5.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def get_order_status(self, order_id) -> dict:
        resp = self.session.get(
            f"{self.base_url}/api/v1/orders/{order_id}/status/",
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def process_payment(self, form_data, additional_data, preference_id, amount):
        resp = self.session.post(
            f"{self.base_url}/api/v1/payments/process/",
            json={
                "formData": form_data,
                "additionalData": additional_data,
                "preferenceId": preference_id,
                "amount": amount,
            },
            timeout=self.timeout,
        )
        return resp.json()


class OrderStatusPoller:
    """
    Polls an order's status until its payment is approved.

    Whether to poll is decided once, from the payment status known when
    the poller starts:

    - approved (or the legacy ``paid``): no polling; navigate to the
      success page after ``redirect_delay``.
    - pending: fetch the status every ``interval`` seconds.
    - anything else: do nothing.

    Fetch errors are logged and the next tick happens as usual. ``stop()``
    or ``close()`` cancel both the next tick and a pending navigation.
    """

    def __init__(
        self,
        order_id,
        payment_status,
        fetch_status,
        navigate,
        on_status_change=None,
        scheduler=None,
        interval=5.0,
        success_delay=2.0,
        redirect_delay=1.0,
    ):
        self.order_id = order_id
        self.initial_status = payment_status
        self.fetch_status = fetch_status
        self.navigate = navigate
        self.on_status_change = on_status_change
        self.scheduler = scheduler or ThreadingScheduler()
        self.interval = interval
        self.success_delay = success_delay
        self.redirect_delay = redirect_delay

        self._lock = threading.Lock()
        self._timer = None
        self._navigation = None
        self._stopped = False
        self._polling = False

    @property
    def success_path(self) -> str:
        return SUCCESS_PATH.format(order_id=self.order_id)

    @property
    def is_polling(self) -> bool:
        return self._polling and not self._stopped

    def start(self):
        if PaymentStatus.is_success(self.initial_status):
            self._schedule_navigation(self.redirect_delay)
        elif self.initial_status == PaymentStatus.PENDING:
            self._polling = True
            self._schedule_tick()
        return self

    def stop(self) -> None:
        with self._lock:
            self._stopped = True
            self._polling = False
            for handle in (self._timer, self._navigation):
                if handle is not None:
                    handle.cancel()
            self._timer = None
            self._navigation = None

    close = stop

    def __enter__(self):
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _schedule_tick(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._timer = self.scheduler.call_later(self.interval, self._tick)

    def _schedule_navigation(self, delay) -> None:
        with self._lock:
            if self._stopped:
                return
            self._navigation = self.scheduler.call_later(delay, self._navigate)

    def _navigate(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._navigation = None
        self.navigate(self.success_path)

    def _tick(self) -> None:
        if self._stopped:
            return

        try:
            data = self.fetch_status(self.order_id)
        except Exception as e:
            logger.warning(
                "order_status_poll_failed", order_id=str(self.order_id), error=str(e)
            )
            self._schedule_tick()
            return

        payment_status = (data or {}).get("paymentStatus")
        if not PaymentStatus.is_success(payment_status):
            self._schedule_tick()
            return

        with self._lock:
            if self._stopped:
                return
            self._polling = False
            self._timer = None

        logger.info(
            "order_payment_confirmed",
            order_id=str(self.order_id),
            payment_status=payment_status,
        )
        if self.on_status_change is not None:
            self.on_status_change(payment_status)
        self._schedule_navigation(self.success_delay)


class PaymentSubmitter:
    """
    Wraps a payment submission so only one runs per user gesture.

    The in-flight flag is set before ``submit`` runs and cleared
    ``cooldown`` seconds after it returns or raises. Calls made while the
    flag is set return None without calling ``submit``.
    """

    def __init__(self, submit, scheduler=None, cooldown=2.0):
        self.submit = submit
        self.scheduler = scheduler or ThreadingScheduler()
        self.cooldown = cooldown
        self._lock = threading.Lock()
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def __call__(self, *args, **kwargs):
        with self._lock:
            if self._in_flight:
                logger.info("duplicate_payment_submission_ignored")
                return None
            self._in_flight = True

        try:
            return self.submit(*args, **kwargs)
        finally:
            self.scheduler.call_later(self.cooldown, self._release)

    def _release(self) -> None:
        with self._lock:
            self._in_flight = False
