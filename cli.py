#!/usr/bin/env python3
"""
Command-line interface for the design import pipeline.
"""

import argparse
import json
import sys
import uuid
from pathlib import Path

from dotenv import load_dotenv

from design_importer.figma.client import FigmaClient
from design_importer.figma.urls import FigmaUrlError, node_slug, parse_figma_url
from design_importer.io.asset_host import get_image_hosting_service
from design_importer.io.screenshot_loader import ArtifactManager, ScreenshotLoader
from design_importer.markup.templates import extract_variables, resolve_variables
from design_importer.models import Component, ImportResult
from design_importer.orchestration.graph import import_design_node, import_markup, run_design_import
from design_importer.pipeline.generation import VisionOracle
from design_importer.rendering.html_renderer import HTMLRenderer, wrap_in_document

# Load environment variables
load_dotenv()


def parse_var_assignments(assignments):
    """``name=value`` pairs from repeated --var flags."""
    values = {}
    for assignment in assignments or []:
        name, sep, value = assignment.partition("=")
        if not sep or not name:
            raise ValueError(f"Invalid --var (expected name=value): {assignment}")
        values[name] = value
    return values


def save_result(result: ImportResult, output_dir: str, render: bool = False) -> Path:
    """Write tree, editor document and HTML of a finished import."""
    artifact_manager = ArtifactManager(output_dir)
    request_id = result.request_id

    components_path = artifact_manager.save_components(request_id, result.components)
    document_path = artifact_manager.save_editor_document(request_id, result.editor_document)
    html_path = artifact_manager.save_html(request_id, wrap_in_document(result.html))

    print(f"🧩 Components: {components_path}")
    print(f"🗂️  Editor document: {document_path}")
    print(f"📄 HTML: {html_path}")

    if render:
        print("\n📸 Rendering screenshot...")
        renderer = HTMLRenderer(headless=True)
        png = renderer.screenshot_html(result.html)
        screenshot_path = artifact_manager.save_screenshot(request_id, png, "rendered")
        print(f"✅ Screenshot: {screenshot_path}")

    return html_path


def report_refinement(result: ImportResult):
    print(f"🔄 Refinement calls: {result.refinement_calls}")
    for entry in result.history:
        if entry.get("status") == "malformed":
            print(f"⚠️  Refinement {entry.get('iteration')} ignored: {entry.get('error')}")
    if result.rehost_failures:
        print(f"⚠️  {len(result.rehost_failures)} asset(s) kept their original URL:")
        for url, error in result.rehost_failures.items():
            print(f"   - {url}: {error}")


def cmd_import_html(args):
    """Import markup into a component tree."""
    print("📥 Importing HTML...")

    html_path = Path(args.html)
    if not html_path.exists():
        print(f"❌ Error: HTML file not found: {html_path}")
        return 1

    markup = html_path.read_text(encoding="utf-8")

    variables = extract_variables(markup)
    if variables:
        print(f"🔤 Template variables: {', '.join(v.name for v in variables)}")
    values = parse_var_assignments(args.var)
    if values:
        markup = resolve_variables(markup, values)

    result = import_markup(markup, request_id=args.request_id or html_path.stem)
    print(f"✅ Imported {len(result.components)} top-level component(s)")

    save_result(result, args.output, render=args.render)
    return 0


def cmd_import_figma(args):
    """Import a Figma node through the vision model."""
    print("🎨 Importing Figma design...")

    try:
        figma_url = parse_figma_url(args.url)
    except FigmaUrlError as e:
        print(f"❌ Error: {e}")
        return 1

    request_id = args.request_id or f"{node_slug(figma_url.file_key, figma_url.node_id)}-{uuid.uuid4().hex[:6]}"
    print(f"📁 File: {figma_url.file_key}")
    print(f"🔖 Node: {figma_url.node_id}")
    print(f"🆔 Request ID: {request_id}")

    design_code = Path(args.design_code).read_text(encoding="utf-8") if args.design_code else None

    oracle = VisionOracle(
        provider=args.provider,
        model_name=args.model,
        temperature=args.temperature,
        request_id=request_id,
    )
    asset_host = None if args.no_rehost else get_image_hosting_service()
    renderer = HTMLRenderer(headless=True) if args.attach_render else None

    with FigmaClient() as figma:
        result = import_design_node(
            figma_url.file_key,
            figma_url.node_id,
            figma,
            oracle,
            asset_host=asset_host,
            design_code=design_code,
            max_refinements=args.max_refinements,
            request_id=request_id,
            renderer=renderer,
        )

    if not result.ok:
        print(f"❌ Generation failed: {result.error}")
        return 1

    print(f"✅ Imported {len(result.components)} top-level component(s)")
    report_refinement(result)
    save_result(result, args.output, render=args.render)
    return 0


def cmd_import_screenshot(args):
    """Import a plain screenshot through the vision model."""
    print("🖼️  Importing screenshot...")

    screenshot_path = Path(args.screenshot)
    if not screenshot_path.exists():
        print(f"❌ Error: Screenshot not found: {screenshot_path}")
        return 1

    request_id = args.request_id or f"{screenshot_path.stem}-{uuid.uuid4().hex[:6]}"
    screenshot = ScreenshotLoader().prepare_for_llm(screenshot_path)

    print(f"🆔 Request ID: {request_id}")
    print(f"📐 Screenshot: {screenshot['width']}x{screenshot['height']}")

    oracle = VisionOracle(
        provider=args.provider,
        model_name=args.model,
        temperature=args.temperature,
        request_id=request_id,
    )
    asset_host = None if args.no_rehost else get_image_hosting_service()

    result = run_design_import(
        screenshot["image"],
        oracle,
        asset_host=asset_host,
        max_refinements=args.max_refinements,
        request_id=request_id,
    )

    if not result.ok:
        print(f"❌ Generation failed: {result.error}")
        return 1

    print(f"✅ Imported {len(result.components)} top-level component(s)")
    report_refinement(result)
    save_result(result, args.output, render=args.render)
    return 0


def cmd_render(args):
    """Render a component tree or HTML file to a screenshot."""
    print("📸 Rendering...")

    source = Path(args.input)
    if not source.exists():
        print(f"❌ Error: File not found: {source}")
        return 1

    renderer = HTMLRenderer(headless=not args.headed)
    if source.suffix == ".json":
        components = [Component.model_validate(item) for item in json.loads(source.read_text(encoding="utf-8"))]
        png = renderer.screenshot_components(components, args.output, width=args.width)
    else:
        png = renderer.screenshot_html(
            source.read_text(encoding="utf-8"), args.output, width=args.width, wait_time=args.wait
        )

    print(f"✅ Screenshot saved: {args.output} ({len(png):,} bytes)")
    return 0


def add_oracle_arguments(subparser):
    subparser.add_argument("--output", "-o", default="outputs", help="Output directory")
    subparser.add_argument("--request-id", "-r", help="Request identifier")
    subparser.add_argument("--provider", "-p", choices=["anthropic", "openai"],
                           help="LLM provider (default: DESIGN_IMPORT_PROVIDER)")
    subparser.add_argument("--model", help="Model name (default: provider default)")
    subparser.add_argument("--temperature", type=float, help="Generation temperature")
    subparser.add_argument("--max-refinements", type=int,
                           help="Refinement cap (default: DESIGN_IMPORT_MAX_REFINEMENTS or 2)")
    subparser.add_argument("--no-rehost", action="store_true", help="Keep transient asset URLs")
    subparser.add_argument("--render", action="store_true", help="Save a screenshot of the result")


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Design import: screenshots, Figma nodes and HTML to editable component trees",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Import HTML command
    html_parser = subparsers.add_parser("import-html", help="Import an HTML file")
    html_parser.add_argument("html", help="Path to HTML file")
    html_parser.add_argument("--output", "-o", default="outputs", help="Output directory")
    html_parser.add_argument("--request-id", "-r", help="Request identifier (default: from filename)")
    html_parser.add_argument("--var", action="append", metavar="NAME=VALUE",
                             help="Resolve a {{NAME}} template variable (repeatable)")
    html_parser.add_argument("--render", action="store_true", help="Save a screenshot of the result")

    # Import Figma command
    figma_parser = subparsers.add_parser("import-figma", help="Import a Figma node by URL")
    figma_parser.add_argument("url", help="Figma design URL with node-id")
    figma_parser.add_argument("--design-code", help="Path to reference code exported from Figma")
    figma_parser.add_argument("--attach-render", action="store_true",
                              help="Attach a render screenshot to each refinement call")
    add_oracle_arguments(figma_parser)

    # Import screenshot command
    shot_parser = subparsers.add_parser("import-screenshot", help="Import a design screenshot")
    shot_parser.add_argument("screenshot", help="Path to screenshot image")
    add_oracle_arguments(shot_parser)

    # Render command
    render_parser = subparsers.add_parser("render", help="Render HTML or components JSON to PNG")
    render_parser.add_argument("input", help="Path to .html or components .json file")
    render_parser.add_argument("--output", "-o", required=True, help="Output PNG path")
    render_parser.add_argument("--width", type=int, default=1280, help="Viewport width")
    render_parser.add_argument("--wait", "-w", type=int, default=500, help="Wait time (ms)")
    render_parser.add_argument("--headed", action="store_true", help="Run browser in headed mode")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        if args.command == "import-html":
            return cmd_import_html(args)
        elif args.command == "import-figma":
            return cmd_import_figma(args)
        elif args.command == "import-screenshot":
            return cmd_import_screenshot(args)
        elif args.command == "render":
            return cmd_render(args)
    except KeyboardInterrupt:
        print("\n\n⚠️  Interrupted by user")
        return 130
    except Exception as e:
        print(f"\n❌ Error: {str(e)}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
