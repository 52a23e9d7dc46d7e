import json

import pandas as pd
import streamlit as st
from pathlib import Path

st.set_page_config(page_title="Vulnerability Explorer")

st.title("Vulnerability Explorer")

data_path = Path("data/indices/indices.csv")
diag_path = Path("data/indices/diagnostics.json")
if data_path.exists():
    df = pd.read_csv(data_path, dtype={"unit_id": str})
    st.dataframe(df.head(50))
    if "composite_index" in df.columns:
        st.subheader("Composite index")
        ranked = df.set_index("unit_id")["composite_index"].sort_values(ascending=False)
        st.bar_chart(ranked.head(25))
else:
    st.warning("Run the preprocessing and `vulnindex` first. File not found: data/indices/indices.csv")

if diag_path.exists():
    report = json.loads(diag_path.read_text(encoding="utf-8"))
    for domain in report.get("domains", []):
        st.subheader(f"{domain['domain']} ({domain['method']})")
        shares = domain.get("explained_variance_ratio")
        if shares:
            st.bar_chart(pd.Series(shares, index=[f"PC{i + 1}" for i in range(len(shares))]))
            st.dataframe(pd.DataFrame(domain["loadings"]).T)
