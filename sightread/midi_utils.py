import logging
import typing
import mido

logger = logging.getLogger(__name__)

def list_input_devices() -> typing.List[str]:
    """Return the names of the available MIDI input ports (empty on failure)."""
    try:
        return list(mido.get_input_names())
    except Exception as e:
        logger.error(f"Failed to list MIDI inputs: {e}")
        return []


def select_input_device(device_name: typing.Optional[str] = None, callback: typing.Optional[typing.Callable] = None) -> typing.Tuple[typing.Optional[str], typing.Optional[typing.Any]]:
    """
    Select and open a MIDI input device.

    If `device_name` is provided and available, that device is opened.
    If it is not found, or no name is given, the first available input is
    opened instead - a practice keyboard is usually the only input attached,
    and a saved device name may not survive a reconnect on another port.

    `callback` is invoked by mido's input thread for every incoming message.

    Returns:
        A tuple of (device_name, midi_in_object) or (None, None) on failure.
    """
    inputs = list_input_devices()
    logger.info(f"Available MIDI inputs: {inputs}")

    if not inputs:
        logger.error("No MIDI input devices found.")
        return None, None

    target = inputs[0]

    if device_name:
        if device_name in inputs:
            target = device_name
        else:
            logger.warning(f"MIDI input device '{device_name}' not found. Fallback to: {target}")

    try:
        midi_in = mido.open_input(target, callback=callback)
        logger.info(f"Opened MIDI input: {target}")
        return target, midi_in

    except Exception as e:
        logger.error(f"Failed to open MIDI input: {e}")
        return None, None
