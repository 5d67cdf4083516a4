"""
Smart car parking application: cameras feed a capture module, a slot
detector turns captured pictures into PTZ commands.
"""

import logging

from endpoints import SENSOR_TUPLE_TYPE, ACTUATOR_TYPE
from .model import Application, AppLoop, EdgeType, FractionalSelectivity

logger = logging.getLogger(__name__)

PICTURE_CAPTURE = "picture-capture"
SLOT_DETECTOR = "slot-detector"

MODULE_RAM = 10


def create_application(app_id: str, user_id: int) -> Application:
    """
    Build and validate the parking application graph.

    Args:
        app_id: Unique identifier of the application
        user_id: Identifier of the user (broker) owning it

    Returns:
        Validated Application with two modules, three edges and one loop
    """
    application = Application.create_application(app_id, user_id)

    application.add_app_module(PICTURE_CAPTURE, MODULE_RAM)
    application.add_app_module(SLOT_DETECTOR, MODULE_RAM)

    application.add_app_edge(SENSOR_TUPLE_TYPE, PICTURE_CAPTURE, 1000, 500,
                             "camera", EdgeType.SENSOR)
    application.add_app_edge(PICTURE_CAPTURE, SLOT_DETECTOR, 1000, 500,
                             "slots", EdgeType.MODULE)
    application.add_app_edge(SLOT_DETECTOR, ACTUATOR_TYPE, 100, 28,
                             "PTZ_PARAMS", EdgeType.ACTUATOR, actuation_length=100)

    application.add_tuple_mapping(PICTURE_CAPTURE, "camera", "slots", FractionalSelectivity(1.0))
    application.add_tuple_mapping(SLOT_DETECTOR, "slots", "PTZ_PARAMS", FractionalSelectivity(1.0))

    loop = AppLoop([SENSOR_TUPLE_TYPE, PICTURE_CAPTURE, SLOT_DETECTOR, ACTUATOR_TYPE])
    application.set_loops([loop])

    application.validate()
    logger.info(f"[APPLICATION] Created {application!r}, loop: {loop}")
    return application
