import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "scriptreel.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
        # Exclude the SQLite database and CSV exports from the reload watcher
        reload_excludes=["data/*", "data/exports/*"]
    )
