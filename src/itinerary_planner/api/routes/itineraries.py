"""Itinerary planning endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...data.sites_repository import SiteRepositoryUnavailable
from ...models.domain import Coordinate
from ...schemas.itinerary import AnchorItineraryRequest, ItineraryResponse, PersonalizedItineraryRequest
from ...services.planner import PlannerService, PlanOptions, Preferences, get_planner_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/itineraries", tags=["itineraries"])


@router.post("/anchor", response_model=ItineraryResponse, status_code=status.HTTP_200_OK)
def plan_from_anchor(
    payload: AnchorItineraryRequest,
    planner: PlannerService = Depends(get_planner_service),
) -> ItineraryResponse:
    options = PlanOptions(
        radius_km=payload.radius_km,
        max_stops=payload.max_stops,
        categories=tuple(payload.categories),
        time_budget_minutes=payload.time_budget_minutes,
        include_restaurants=payload.include_restaurants,
        include_lodging=payload.include_lodging,
        owner_id=payload.owner_id,
        event_id=payload.event_id,
    )
    try:
        itinerary = planner.plan_from_anchor(Coordinate(payload.latitude, payload.longitude), options)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SiteRepositoryUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error planning itinerary from anchor: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate itinerary",
        ) from exc
    return ItineraryResponse.from_itinerary(itinerary)


@router.post("/personalized", response_model=ItineraryResponse, status_code=status.HTTP_200_OK)
def plan_personalized(
    payload: PersonalizedItineraryRequest,
    planner: PlannerService = Depends(get_planner_service),
) -> ItineraryResponse:
    try:
        itinerary = planner.plan_personalized(
            Coordinate(payload.latitude, payload.longitude),
            interests=payload.interests,
            duration_minutes=payload.duration_minutes,
            transport_mode=payload.transport_mode,
            preferences=Preferences(
                accessibility=payload.accessibility,
                family_friendly=payload.family_friendly,
            ),
            owner_id=payload.owner_id,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SiteRepositoryUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error planning personalized itinerary: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate itinerary",
        ) from exc
    return ItineraryResponse.from_itinerary(itinerary)
