from fastapi import APIRouter, Depends

from routers.deps import get_store
from schemas.performance import ResultSubmit
from services import performance as performance_service
from services import students as student_service

router = APIRouter(prefix="/performance", tags=["Performance"])


# 1. SUMMARY + RESULT LIST
@router.get("/")
def get_performance(category: str = "All", search: str = "", store=Depends(get_store)):
    roster = student_service.active_roster(store)
    results = store.select_all("performance")
    overview = performance_service.overview(results, roster)

    term = search.strip().lower()
    records = [
        r for r in results
        if (category == "All" or r.student_category == category)
        and (not term or term in (r.student_name or "").lower())
    ]
    return {
        "overall_average": overview.overall_average,
        "top_performer": overview.top_performer,
        "summaries": overview.summaries,
        "results": records,
    }


# 2. ADD RESULT
@router.post("/results", status_code=201)
def add_result(payload: ResultSubmit, store=Depends(get_store)):
    result = performance_service.record_result(store, payload)
    return {"message": "Result Saved", "result": result}


# 3. VIEW / EDIT RESULT
@router.get("/results/{result_id}")
def get_result(result_id: int, store=Depends(get_store)):
    return performance_service.get_result(store, result_id)


@router.put("/results/{result_id}")
def edit_result(result_id: int, payload: ResultSubmit, store=Depends(get_store)):
    result = performance_service.edit_result(store, result_id, payload)
    return {"message": "Result Updated", "result": result}
