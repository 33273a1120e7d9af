from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge, Histogram

from claudescope.models import UsageData


class UsageMetrics:
    """
    applies UsageData to Prometheus gauges, labelled by window.

    A window without data has its labelled series removed instead of
    being set to 0, so "no data" and "0% used" stay distinguishable
    for whoever scrapes the exporter.
    """

    def __init__(self, registry: "CollectorRegistry" = REGISTRY) -> "None":
        self._utilization: "Gauge" = Gauge(
            "claudescope_utilization_ratio",
            "Fraction of the usage window consumed (0-1)",
            ["window"],
            registry=registry,
        )
        self._resets_at: "Gauge" = Gauge(
            "claudescope_resets_at_timestamp_seconds",
            "Unix timestamp at which the usage window resets",
            ["window"],
            registry=registry,
        )
        self._fetch_errors: "Counter" = Counter(
            "claudescope_fetch_errors_total",
            "Total number of failed usage fetches by error kind",
            ["kind"],
            registry=registry,
        )
        self._fetch_duration: "Histogram" = Histogram(
            "claudescope_fetch_duration_seconds",
            "Duration of usage fetches",
            registry=registry,
        )
        self._last_fetch_success: "Gauge" = Gauge(
            "claudescope_last_fetch_success_timestamp_seconds",
            "Unix timestamp of the last successful usage fetch",
            registry=registry,
        )
        # (gauge name, window) pairs currently exported
        self._present: "set[tuple[str, str]]" = set()

    def _set_or_remove(
        self, name: "str", gauge: "Gauge", window: "str", value: "float | None"
    ) -> "None":
        key = (name, window)
        if value is not None:
            gauge.labels(window=window).set(value)
            self._present.add(key)
        elif key in self._present:
            gauge.remove(window)
            self._present.discard(key)

    def update_usage(self, data: "UsageData") -> "None":
        windows = {
            "five_hour": (data.five_hour_utilization, data.five_hour_resets_at),
            "seven_day": (data.weekly_utilization, data.weekly_resets_at),
        }
        for window, (utilization, resets_at) in windows.items():
            self._set_or_remove("utilization", self._utilization, window, utilization)
            self._set_or_remove(
                "resets_at",
                self._resets_at,
                window,
                resets_at.timestamp() if resets_at else None,
            )

    def observe_fetch_duration(self, duration_seconds: "float") -> "None":
        self._fetch_duration.observe(duration_seconds)

    def inc_fetch_error(self, kind: "str") -> "None":
        self._fetch_errors.labels(kind=kind).inc()

    def set_last_fetch_success(self, timestamp: "float") -> "None":
        self._last_fetch_success.set(timestamp)
