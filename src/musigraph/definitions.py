from dagster import Definitions, load_assets_from_modules

from musigraph.assets.exploration import (
    catalog_assets,
    graph_assets,
    insights_assets,
    profile_assets,
    search_assets,
)
from musigraph.resources import ExplorerResource


asset_modules = [
    search_assets,
    profile_assets,
    insights_assets,
    graph_assets,
    catalog_assets,
]

all_assets = load_assets_from_modules(asset_modules)

defs = Definitions(
    assets=all_assets,
    # Client configuration shared by every exploration asset
    resources={
        "explorer": ExplorerResource(),
    },
)
