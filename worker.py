# worker.py
from prefect import serve
from expense_tracker.processing import run_csv_pipeline
from expense_tracker.seed import run_seed_generation

if __name__ == "__main__":
    # 1. Import a CSV of daily expenses dropped into the shared upload directory.
    csv_processor = run_csv_pipeline.to_deployment(
        name="csv-importer",
        tags=["csv"],
        description="Imports uploaded daily expense CSVs in the background."
    )

    # 2. On-demand demo data for a user.
    seed_generator = run_seed_generation.to_deployment(
        name="demo-seed-job",
        tags=["generation", "manual"],
        description="Generates dummy daily expenses for a user and imports them."
    )

    serve(csv_processor, seed_generator, limit=1, pause_on_shutdown=False)
