import pandas as pd
import plotly.graph_objects as go

from pydantic_models import PredictionResult

NO_PREDICTIONS_MESSAGE = "No predictions available."

COLORS = ["#0ea5e9", "#3b82f6", "#6366f1", "#8b5cf6", "#a855f7"]

COLUMNS = ["Condition", "Confidence (%)", "Description", "Next Steps"]


def results_frame(result: PredictionResult) -> pd.DataFrame:
    """One row per prediction, in display order."""
    rows = [
        [p.condition, p.confidence, p.description, p.next_steps]
        for p in result.predictions
    ]
    return pd.DataFrame(rows, columns=COLUMNS)


def confidence_chart(result: PredictionResult) -> go.Figure:
    df = results_frame(result)
    fig = go.Figure(data=[
        go.Bar(
            x=df["Condition"],
            y=df["Confidence (%)"],
            marker=dict(color=[COLORS[i % len(COLORS)] for i in range(len(df))]),
            text=[f"{c:.0f}%" for c in df["Confidence (%)"]],
            textposition="auto",
        )
    ])
    fig.update_layout(
        title="Confidence Breakdown",
        yaxis=dict(title="Confidence", ticksuffix="%", range=[0, 100]),
        xaxis=dict(categoryorder="array", categoryarray=list(df["Condition"])),
        height=320,
        margin=dict(l=20, r=20, t=40, b=20),
    )
    return fig
