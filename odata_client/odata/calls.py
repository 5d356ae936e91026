"""
odata_client.odata.calls - Calling convention helpers
=======================================================

Every public operation accepts ``(options)``, ``(options, callback)`` or
``(callback)``, plus keyword options merged over ``options``. Results and
errors are delivered as ``callback(error, result, *extra)``.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional, Tuple

Callback = Callable[..., Any]


def default_callback(error: Optional[BaseException], result: Any = None, *extra: Any) -> Any:
    """Raise ``error`` if set, otherwise return the result (and any extras)."""
    if error is not None:
        raise error
    if extra:
        return (result,) + extra
    return result


def normalize_call(
    options: Any,
    callback: Optional[Callback],
    kwargs: Mapping[str, Any],
) -> Tuple[Optional[Dict[str, Any]], Callback]:
    """
    Resolve the optional ``options``/``callback`` arguments.

    Returns ``(options, callback)``; options is None when the positional
    options argument is neither a mapping, a callable nor None.
    """
    if callback is None and callable(options) and not isinstance(options, Mapping):
        options, callback = None, options
    cb = callback or default_callback

    if options is None:
        opts: Dict[str, Any] = {}
    elif isinstance(options, Mapping):
        opts = dict(options)
    else:
        return None, cb
    opts.update(kwargs)
    return opts, cb
