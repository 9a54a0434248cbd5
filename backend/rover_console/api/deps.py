from fastapi import Request

from rover_console.services.alert_board import AlertBoard
from rover_console.services.detection_feed import RoverApiClient
from rover_console.services.polling import PeriodicRefresh


def get_board(request: Request) -> AlertBoard:
    return request.app.state.board


def get_rover_client(request: Request) -> RoverApiClient:
    return request.app.state.rover_client


def get_pollers(request: Request) -> list[PeriodicRefresh]:
    return getattr(request.app.state, "pollers", [])
