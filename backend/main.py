import uvicorn

from study_analytics import app


@app.get("/", tags=["Root"])
async def read_root():
    return {"message": "Welcome to the Study Analytics API!"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
