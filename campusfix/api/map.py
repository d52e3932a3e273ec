"""
Campus map API endpoints.

Serves the static map (buildings, waypoints, roads), walking routes
between waypoints and the per-building issue overlay.
"""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from campusfix.api.deps import get_campus_graph, get_ticket_service
from campusfix.api.schemas import (
    BuildingIssueResponse,
    BuildingResponse,
    NavigationStepResponse,
    RouteResponse,
    WaypointResponse,
)
from campusfix.models.campus_graph import CampusGraph
from campusfix.services.issue_correlator import priority_color
from campusfix.services.ticket_service import TicketService

router = APIRouter(prefix="/map", tags=["Campus Map"])


@router.get("")
async def get_map(graph: CampusGraph = Depends(get_campus_graph)):
    """Everything a client needs to draw the 2D map."""
    return graph.to_dict()


@router.get("/buildings", response_model=list[BuildingResponse])
async def list_buildings(graph: CampusGraph = Depends(get_campus_graph)):
    return [BuildingResponse.model_validate(b) for b in graph.buildings.values()]


@router.get("/buildings/{building_id}", response_model=BuildingResponse)
async def get_building(building_id: str, graph: CampusGraph = Depends(get_campus_graph)):
    """Look up a building by id or name."""
    building = graph.get_building(building_id)
    if building is None:
        raise HTTPException(status_code=404, detail=f"Building not found: {building_id}")
    return BuildingResponse.model_validate(building)


@router.get("/waypoints", response_model=list[WaypointResponse])
async def list_waypoints(
    entrances_only: bool = Query(False, description="Only waypoints selectable as route ends"),
    graph: CampusGraph = Depends(get_campus_graph),
):
    waypoints = graph.entrances() if entrances_only else list(graph.waypoints.values())
    return [WaypointResponse.model_validate(w) for w in waypoints]


@router.get("/route", response_model=RouteResponse)
async def get_route(
    start: Optional[str] = Query(None, description="Start waypoint id"),
    end: Optional[str] = Query(None, description="End waypoint id"),
    graph: CampusGraph = Depends(get_campus_graph),
):
    """
    Shortest walking route by number of hops.

    An unset or unknown waypoint, or an unreachable end, gives an empty
    path rather than an error.
    """
    path = graph.find_route(start, end)
    return RouteResponse(
        start=start,
        end=end,
        path=path,
        hops=max(len(path) - 1, 0),
        distance=round(graph.route_distance(path), 1),
        found=bool(path),
        steps=[
            NavigationStepResponse(description=s.description, point_id=s.point_id)
            for s in graph.describe_route(path)
        ],
    )


@router.get("/issues", response_model=list[BuildingIssueResponse])
async def get_building_issues(
    graph: CampusGraph = Depends(get_campus_graph),
    service: TicketService = Depends(get_ticket_service),
):
    """Open issue count and worst severity for each building with open tickets."""
    summary = service.building_issue_summary()
    results = []
    for building_id, issues in summary.items():
        building = graph.buildings.get(building_id)
        results.append(BuildingIssueResponse(
            building_id=building_id,
            building_name=building.name if building else building_id,
            count=issues.count,
            max_priority=issues.max_priority,
            color=priority_color(issues.max_priority),
        ))
    return results
