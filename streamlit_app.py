"""
Tile Mosaic — Gallery Edition

Run with:
    streamlit run streamlit_app.py
"""

from __future__ import annotations

import io
import time

import streamlit as st
from PIL import Image, ImageDraw

from tile_mosaic.benchmark import run_benchmark
from tile_mosaic.checker import check_correctness
from tile_mosaic.config import MosaicConfig
from tile_mosaic.engine import MosaicEngine
from tile_mosaic.errors import MosaicError
from tile_mosaic.image_io import array_to_pil, decode_image_bytes
from tile_mosaic.strategies import Algorithm, get_strategy

# -- Page config -------------------------------------------------------
st.set_page_config(
    page_title="Tile Mosaic",
    page_icon=None,
    layout="wide",
    initial_sidebar_state="collapsed",
)

_DEFAULTS = MosaicConfig()

# -- CSS ---------------------------------------------------------------
st.markdown("""
<style>
    @import url('https://fonts.googleapis.com/css2?family=Cormorant+Garamond:ital,wght@0,300;0,400;1,300&family=Inter:wght@200;300;400&display=swap');

    .stApp {
        background-color: #faf9f6;
        color: #2a2a2a;
        font-family: 'Inter', 'Helvetica Neue', sans-serif;
    }
    .block-container {
        max-width: 1000px;
        padding-top: 3.5rem;
        padding-bottom: 4rem;
    }
    .gallery-title {
        font-family: 'Cormorant Garamond', 'Georgia', serif;
        font-size: 2.8rem;
        font-weight: 300;
        letter-spacing: 0.06em;
        text-align: center;
        color: #1a1a1a;
        border-bottom: 1px solid #1a1a1a;
        padding-bottom: 0.6rem;
        margin-bottom: 0.5rem;
    }
    .gallery-subtitle {
        font-family: 'Inter', sans-serif;
        font-size: 0.75rem;
        font-weight: 300;
        color: #1a1a1a;
        letter-spacing: 0.04em;
        line-height: 1.8;
        margin-bottom: 3.5rem;
    }
    .label-detail {
        font-family: 'Cormorant Garamond', 'Georgia', serif;
        font-size: 0.85rem;
        font-style: italic;
        color: #a0a09a;
        text-align: center;
    }
    .stButton > button, .stDownloadButton > button,
    div[data-testid="stFileUploader"] {
        border-radius: 0px !important;
    }
    div[data-testid="stMetric"] {
        border: 1px solid #e0ded8;
        padding: 1rem 1.2rem;
    }
    hr { border: none; border-top: 1px solid #e0ded8; margin: 2.5rem 0; }
    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
    header {visibility: hidden;}
</style>
""", unsafe_allow_html=True)


# -- Helpers -----------------------------------------------------------

def _add_passepartout(img: Image.Image, border: int = 20) -> Image.Image:
    img = img.convert("RGB")
    w, h = img.size
    canvas = Image.new("RGB", (w + border * 2, h + border * 2), (250, 249, 246))
    canvas.paste(img, (border, border))
    draw = ImageDraw.Draw(canvas)
    draw.rectangle(
        [border - 1, border - 1, border + w, border + h],
        outline=(224, 222, 216), width=1,
    )
    return canvas


# -- Title -------------------------------------------------------------
st.markdown(
    '<div class="gallery-title">Tile Mosaic</div>',
    unsafe_allow_html=True,
)
st.markdown(
    '<div class="gallery-subtitle">'
    "Upload an image and it is cut into square tiles. Every tile is replaced "
    "by the average of its own pixels, channel by channel, so the picture "
    "dissolves into a grid of flat colour blocks. Three execution strategies "
    "compute the same result: a serial reference, a lock-free parallel version "
    "and a deliberately lock-bound one."
    "</div>",
    unsafe_allow_html=True,
)

# -- Controls ----------------------------------------------------------
ctrl1, ctrl2 = st.columns(2)
with ctrl1:
    tile_side = st.slider("Tile side (px)", 1, 128, _DEFAULTS.tile_side)
with ctrl2:
    algorithm = st.selectbox(
        "Algorithm",
        [a.value for a in Algorithm],
        index=[a.value for a in Algorithm].index(_DEFAULTS.algorithm),
    )

st.markdown("---")

# -- Upload ------------------------------------------------------------
uploaded = st.file_uploader(
    "Select artwork",
    type=sorted(ext.lstrip(".") for ext in _DEFAULTS.SUPPORTED_EXTENSIONS),
)

if uploaded is not None:
    try:
        engine = MosaicEngine.from_image(
            decode_image_bytes(uploaded.getvalue(), uploaded.name), tile_side,
        )
    except MosaicError as exc:
        st.error(str(exc))
        st.stop()

    strategy = get_strategy(algorithm)

    if st.button("COMPOSE", type="primary", use_container_width=True):
        t0 = time.perf_counter()
        result = engine.run_pipeline(strategy)
        elapsed = time.perf_counter() - t0

        mosaic_img = array_to_pil(engine.mosaic_image(result.mosaic))
        st.image(_add_passepartout(mosaic_img, border=28), use_container_width=True)

        buf = io.BytesIO()
        mosaic_img.save(buf, format="PNG")
        _, dl_col, _ = st.columns([1, 2, 1])
        with dl_col:
            st.download_button(
                "SAVE MOSAIC",
                data=buf.getvalue(),
                file_name="tile_mosaic.png",
                mime="image/png",
                use_container_width=True,
            )

        m1, m2, m3, m4 = st.columns(4)
        m1.metric("Resolution", f"{engine.width} × {engine.height}")
        m2.metric("Tiles", f"{engine.tiles_x} × {engine.tiles_y}")
        m3.metric("Global average", ", ".join(str(v) for v in result.global_average))
        m4.metric("Time", f"{elapsed * 1000:.1f} ms")

        st.image(_add_passepartout(engine.image.to_pil(), border=12), use_container_width=True)
        st.markdown(
            '<div class="label-detail">Source, cropped to whole tiles</div>',
            unsafe_allow_html=True,
        )

    with st.expander("Benchmark all algorithms"):
        runs = st.number_input("Runs", min_value=1, max_value=100, value=_DEFAULTS.compare_runs)
        if st.button("RUN BENCHMARK", use_container_width=True):
            rows = []
            for algo in Algorithm:
                candidate = get_strategy(algo)
                report = check_correctness(engine, candidate)
                timing = run_benchmark(engine, candidate, int(runs))
                rows.append({
                    "algorithm": candidate.name,
                    "sum (ms)": timing.sum_ns / 1e6,
                    "average (ms)": timing.average_ns / 1e6,
                    "mosaic (ms)": timing.mosaic_ns / 1e6,
                    "total (ms)": timing.total_ns / 1e6,
                    "matches serial": report.ok,
                })
            st.dataframe(rows, use_container_width=True)

else:
    st.markdown(
        '<p style="font-family: Cormorant Garamond, Georgia, serif; '
        "color: #bbb; font-size: 1rem; font-weight: 300; "
        'font-style: italic; margin-top: 2rem;">'
        "Select an artwork to begin.</p>",
        unsafe_allow_html=True,
    )
