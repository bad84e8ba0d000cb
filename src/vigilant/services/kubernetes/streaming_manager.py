"""Pod log retrieval for the log screen.

Static reads return the tail of a container's log as one string. Follow
mode returns an iterator of lines read from an unbuffered HTTP response,
which the caller consumes on a worker thread and may abandon at any time.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from vigilant.services.kubernetes.base import K8sBaseManager

DEFAULT_TAIL_LINES = 500


class StreamingManager(K8sBaseManager):
    """Reads and follows pod container logs."""

    _entity_name = "logs"

    def stream_logs(
        self,
        pod_name: str,
        namespace: str | None = None,
        *,
        container: str | None = None,
        follow: bool = False,
        tail_lines: int | None = DEFAULT_TAIL_LINES,
        previous: bool = False,
        timestamps: bool = False,
        since_seconds: int | None = None,
    ) -> str | Iterator[str]:
        """Get or follow logs from a pod.

        Args:
            pod_name: Pod name.
            namespace: Pod namespace.
            container: Container name; required by the API for multi-container pods.
            follow: Stream new lines as they are written.
            tail_lines: Number of lines from the end, None for the whole log.
            previous: Read the previous (crashed) container instance.
            timestamps: Prefix each line with its RFC3339 timestamp.
            since_seconds: Only return lines newer than this many seconds.

        Returns:
            Log content as a string, or an iterator of lines when following.

        Raises:
            KubernetesError: If the log request is rejected.
        """
        ns = self._resolve_namespace(namespace) or "default"
        self._log.debug(
            "reading_logs",
            pod=pod_name,
            namespace=ns,
            container=container,
            follow=follow,
        )

        kwargs: dict[str, Any] = {"name": pod_name, "namespace": ns}
        if container:
            kwargs["container"] = container
        if tail_lines is not None:
            kwargs["tail_lines"] = tail_lines
        if previous:
            kwargs["previous"] = previous
        if timestamps:
            kwargs["timestamps"] = timestamps
        if since_seconds is not None:
            kwargs["since_seconds"] = since_seconds

        if follow:
            return self._follow_logs(pod_name, ns, kwargs)

        try:
            logs: str = self._client.core_v1.read_namespaced_pod_log(**kwargs)
        except Exception as e:
            self._handle_api_error(e, "Pod", pod_name, ns)
        return logs

    def _follow_logs(
        self, pod_name: str, namespace: str, kwargs: dict[str, Any]
    ) -> Iterator[str]:
        """Yield log lines until the stream closes or the consumer stops.

        The request is issued before the first line is yielded, so API errors
        surface from the first ``next()`` call.
        """
        try:
            response = self._client.core_v1.read_namespaced_pod_log(
                **kwargs, follow=True, _preload_content=False
            )
        except Exception as e:
            self._handle_api_error(e, "Pod", pod_name, namespace)

        buffer = ""
        try:
            for chunk in _iter_chunks(response):
                buffer += chunk.decode("utf-8", errors="replace") if isinstance(chunk, bytes) else chunk
                *lines, buffer = buffer.split("\n")
                yield from lines
            if buffer:
                yield buffer
        finally:
            _release(response)

    def list_containers(self, pod_name: str, namespace: str) -> list[str]:
        """Container names from the pod spec, init containers excluded."""
        try:
            pod = self._client.core_v1.read_namespaced_pod(name=pod_name, namespace=namespace)
        except Exception as e:
            self._handle_api_error(e, "Pod", pod_name, namespace)
        return [c.name for c in (pod.spec.containers or [])]


def _iter_chunks(response: Any) -> Iterator[bytes | str]:
    """Iterate an urllib3 response without waiting for full chunks."""
    stream = getattr(response, "stream", None)
    if callable(stream):
        return iter(stream(amt=None, decode_content=True))
    return iter(response)


def _release(response: Any) -> None:
    for method in ("close", "release_conn"):
        func = getattr(response, method, None)
        if callable(func):
            func()
