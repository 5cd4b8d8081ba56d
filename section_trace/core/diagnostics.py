# section_trace/core/diagnostics.py

def _exc_to_str(e):
    try:
        return str(e)
    except Exception:
        return "<unstringifiable exception>"


class Diagnostics(object):
    """
    Structured diagnostics recorder for one trace call.

    - Bounded event storage
    - Aggregated counts
    - JSON-safe output
    - De-duplicated INFO events for per-element spam
    """

    def __init__(self, max_events=200):
        self.max_events = int(max_events)

        self.events = []
        self.counts = {}
        self.dropped_events = 0

        # dedupe_key -> {index: int|None, suppressed: int}
        self._dedupe = {}

    def _count_key(self, level, phase, callsite, exc_type):
        return "{}|{}|{}|{}".format(level, phase, callsite, exc_type or "")

    def _record(self, payload):
        key = self._count_key(
            payload.get("level"),
            payload.get("phase"),
            payload.get("callsite"),
            payload.get("exc_type"),
        )
        self.counts[key] = self.counts.get(key, 0) + 1

        if len(self.events) >= self.max_events:
            self.dropped_events += 1
            return None

        self.events.append(payload)
        return len(self.events) - 1

    def _payload(self, level, phase, callsite, message, exc=None, view_id=None, elem_id=None, extra=None):
        return {
            "level": level,
            "phase": phase,
            "callsite": callsite,
            "message": message,
            "exc_type": type(exc).__name__ if exc is not None else None,
            "exc_message": _exc_to_str(exc) if exc is not None else None,
            "view_id": view_id,
            "elem_id": elem_id,
            "extra": extra or {},
        }

    def warn(self, phase, callsite, message, view_id=None, elem_id=None, extra=None):
        self._record(self._payload("WARN", phase, callsite, message, view_id=view_id, elem_id=elem_id, extra=extra))

    def error(self, phase, callsite, message, exc=None, view_id=None, elem_id=None, extra=None):
        self._record(
            self._payload("ERROR", phase, callsite, message, exc=exc, view_id=view_id, elem_id=elem_id, extra=extra)
        )

    def info_dedupe(self, dedupe_key, phase, callsite, message, view_id=None, elem_id=None, extra=None):
        """Record at most one INFO event per dedupe_key, with a suppressed_count.

        - First call records an INFO event with extra.suppressed_count=0.
        - Subsequent calls increment suppressed_count without recording more events.

        Used for classification fallbacks, which repeat once per layer.
        """
        entry = self._dedupe.get(dedupe_key)
        if entry is None:
            payload_extra = dict(extra or {})
            payload_extra.setdefault("suppressed_count", 0)
            payload = self._payload("INFO", phase, callsite, message, view_id=view_id, elem_id=elem_id,
                                    extra=payload_extra)
            idx = self._record(payload)
            self._dedupe[dedupe_key] = {"index": idx, "suppressed": 0}
            return

        entry["suppressed"] += 1
        idx = entry.get("index")
        if idx is not None and 0 <= idx < len(self.events):
            ev_extra = self.events[idx].get("extra")
            if isinstance(ev_extra, dict):
                ev_extra["suppressed_count"] = entry["suppressed"]

    def record_trace_error(self, err, phase, callsite, view_id=None):
        """Mirror a TraceError value into the event stream as a WARN."""
        extra = dict(err.extra)
        extra["kind"] = err.kind.value
        self.warn(phase, callsite, err.message, view_id=view_id, elem_id=err.elem_id, extra=extra)

    def to_dict(self):
        return {
            "max_events": self.max_events,
            "num_events": len(self.events),
            "dropped_events": self.dropped_events,
            "counts": dict(self.counts),
            "events": list(self.events),
        }
