import typing


CallbackType = typing.Callable[..., typing.Any]


class EventEmitter:

	"""
	A synchronous event emitter.

	The trainer publishes cursor feedback, cursor advances and finished
	sessions through an emitter so a renderer can follow along without the
	trainer knowing anything about it.  Listeners run immediately, in
	registration order, on the emitting thread.
	"""

	def __init__ (self) -> None:

		self._listeners: typing.Dict[str, typing.List[CallbackType]] = {}


	def on (self, event_name: str, callback: CallbackType) -> None:

		"""
		Register a callback for an event name.
		"""

		self._listeners.setdefault(event_name, []).append(callback)


	def off (self, event_name: str, callback: CallbackType) -> None:

		"""
		Unregister a previously registered callback.

		Raises ``ValueError`` if the callback is not registered for the event.
		"""

		if callback not in self._listeners.get(event_name, []):
			raise ValueError(f"Callback not registered for event {event_name!r}")

		self._listeners[event_name].remove(callback)


	def emit (self, event_name: str, *args: typing.Any, **kwargs: typing.Any) -> None:

		"""
		Call every listener for an event.  Listener exceptions propagate.
		"""

		for callback in list(self._listeners.get(event_name, [])):
			callback(*args, **kwargs)
