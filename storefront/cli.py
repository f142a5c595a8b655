"""Flask CLI commands for gallery operations."""
import click
from flask import current_app


def _functions_client(timeout=120.0):
    from storefront.client.functions_client import FunctionsClient

    return FunctionsClient(current_app.config["FUNCTIONS_BASE_URL"], timeout=timeout)


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        from storefront.extensions import db

        db.create_all()
        click.echo("Database initialized.")

    @app.cli.command("gallery-view")
    @click.argument("product_id")
    @click.option("--color", default="black")
    @click.option("--generate/--no-generate", default=True, help="Generate missing angles")
    def gallery_view(product_id, color, generate):
        """Show (and optionally generate) a product's angle gallery."""
        from storefront.catalog import get_product, image_url
        from storefront.client.gallery import ProductGallery
        from storefront.client.local_cache import default_cache

        product = get_product(product_id)
        if not product:
            raise click.ClickException(f"Unknown product: {product_id}")

        def show_progress(gallery):
            if gallery.is_generating:
                done = sum(1 for s in gallery.slots if not s.is_loading)
                click.echo(f"  {done}/{len(gallery.slots)} angles ready")

        gallery = ProductGallery(
            product.id,
            product.name,
            product.category,
            image_url(product),
            client=_functions_client(),
            cache=default_cache(),
            color=color,
            auto_generate=generate,
            on_change=show_progress,
        )
        gallery.mount()

        click.echo(f"{product.name} [{gallery.state.value}]")
        for slot in gallery.slots:
            suffix = f"  ({slot.error})" if slot.error else ""
            click.echo(f"  {slot.angle:<7} {slot.url}{suffix}")

    @app.cli.command("gallery-batch")
    @click.option("--enqueue", is_flag=True, help="Run on the RQ worker instead")
    def gallery_batch(enqueue):
        """Generate gallery images for every catalog product."""
        from storefront import extensions
        from storefront.catalog import PRODUCTS, image_url
        from storefront.client.functions_client import FunctionCallError

        client = _functions_client(timeout=900.0)
        existing = {}
        for product in PRODUCTS:
            click.echo(f"Loading {product.name} image...")
            try:
                existing[product.id] = client.fetch_image_data_url(image_url(product))
            except FunctionCallError as e:
                click.echo(f"  failed: {e.message}", err=True)

        if enqueue:
            job = extensions.task_queue.enqueue(
                "storefront.workers.gallery_batch.run_batch_job",
                existing,
                job_timeout=3600,
            )
            click.echo(f"Enqueued batch job: {job.id if job else 'not queued'}")
            return

        click.echo("Generating gallery images (this takes a few minutes)...")
        try:
            data = client.run_batch(existing)
        except FunctionCallError as e:
            raise click.ClickException(f"Batch generation failed: {e.message}")
        click.echo(
            f"Generated: {data['generated']}  Skipped: {data['skipped']}  Failed: {data['failed']}"
        )

    @app.cli.command("gallery-stats")
    def gallery_stats():
        """Show recorded gallery angles per catalog product."""
        from storefront.catalog import PRODUCTS
        from storefront.services.gallery_service import GENERATED_ANGLES, get_gallery

        for product in PRODUCTS:
            recorded = get_gallery(product.id)
            angles = ", ".join(a for a in GENERATED_ANGLES if a in recorded) or "—"
            click.echo(f"{product.id:<22} {len(recorded)}/{len(GENERATED_ANGLES)}  {angles}")

    @app.cli.command("gallery-reset")
    @click.argument("product_id")
    @click.option("--angle", type=click.Choice(["side", "back", "detail"]), default=None)
    @click.confirmation_option(prompt="Delete the stored gallery images?")
    def gallery_reset(product_id, angle):
        """Delete recorded gallery images so they can be regenerated."""
        from storefront.extensions import db
        from storefront.models.gallery_image import GalleryImage
        from storefront.services import storage_service
        from storefront.services.gallery_service import storage_key

        query = GalleryImage.query.filter_by(product_id=product_id)
        if angle:
            query = query.filter_by(angle=angle)
        rows = query.all()
        for row in rows:
            storage_service.delete(storage_key(row.product_id, row.angle))
            db.session.delete(row)
        db.session.commit()
        click.echo(f"Removed {len(rows)} gallery image(s) for {product_id}.")
