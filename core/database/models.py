"""
Database models for the code-analysis datamart.

The datamart is populated by the analysis platform; this service only reads it.
"""
from sqlalchemy import (
    Column, Integer, String, DateTime, Float, Boolean, ForeignKey, Index
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class DimSnapshot(Base):
    """One analysis run of one application."""
    __tablename__ = "dim_snapshots"

    snapshot_id = Column(String(64), primary_key=True)
    application_id = Column(Integer, nullable=False, index=True)
    application_name = Column(String(255), nullable=False, index=True)
    analysis_date = Column(DateTime, nullable=False)
    is_latest = Column(Boolean, nullable=False, default=False)  # one latest snapshot per application
    year = Column(Integer, nullable=True)
    year_month = Column(String(7), nullable=True)  # YYYY-MM
    version = Column(String(100), nullable=True)

    # Relationships
    health_scores = relationship("AppHealthScore", back_populates="snapshot", cascade="all, delete-orphan")
    sizing = relationship("AppSizingMeasure", back_populates="snapshot", uselist=False, cascade="all, delete-orphan")
    violations = relationship("AppViolationsMeasure", back_populates="snapshot", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_snapshots_latest_app', 'is_latest', 'application_name'),
    )

    def __repr__(self):
        return f"<DimSnapshot(id='{self.snapshot_id}', application='{self.application_name}', latest={self.is_latest})>"


class DimApplication(Base):
    """Business metadata attached to an application name."""
    __tablename__ = "dim_applications"

    application_name = Column(String(255), primary_key=True)
    business_unit = Column("Business Unit", String(255), nullable=True)
    country = Column(String(100), nullable=True)
    sourcing = Column(String(100), nullable=True)

    def __repr__(self):
        return f"<DimApplication(name='{self.application_name}', business_unit='{self.business_unit}')>"


class AppHealthScore(Base):
    """Score of one business criterion for one snapshot."""
    __tablename__ = "app_health_scores"

    id = Column(Integer, primary_key=True, autoincrement=True)
    snapshot_id = Column(String(64), ForeignKey("dim_snapshots.snapshot_id"), nullable=False, index=True)
    business_criterion_name = Column(String(255), nullable=False, index=True)
    score = Column(Float, nullable=True)  # 1.0-4.0, higher is better
    compliance_score = Column(Float, nullable=True)  # 0.0-1.0, ISO criteria
    nb_critical_violations = Column(Integer, default=0)
    nb_violations = Column(Integer, default=0)

    # Relationships
    snapshot = relationship("DimSnapshot", back_populates="health_scores")

    __table_args__ = (
        Index('idx_health_snapshot_criterion', 'snapshot_id', 'business_criterion_name'),
    )

    def __repr__(self):
        return f"<AppHealthScore(snapshot='{self.snapshot_id}', criterion='{self.business_criterion_name}', score={self.score})>"


class AppSizingMeasure(Base):
    """Code volume facts for one snapshot."""
    __tablename__ = "app_sizing_measures"

    snapshot_id = Column(String(64), ForeignKey("dim_snapshots.snapshot_id"), primary_key=True)
    nb_code_lines = Column(Integer, default=0)
    nb_files = Column(Integer, default=0)
    nb_artifacts = Column(Integer, default=0)
    technical_debt_total = Column(Float, default=0.0)
    nb_complexity_high = Column(Integer, default=0)
    nb_complexity_medium = Column(Integer, default=0)
    nb_complexity_low = Column(Integer, default=0)

    # Relationships
    snapshot = relationship("DimSnapshot", back_populates="sizing")

    def __repr__(self):
        return f"<AppSizingMeasure(snapshot='{self.snapshot_id}', loc={self.nb_code_lines})>"


class AppViolationsMeasure(Base):
    """Violation counts for one rule of one technology in one snapshot."""
    __tablename__ = "app_violations_measures"

    id = Column(Integer, primary_key=True, autoincrement=True)
    snapshot_id = Column(String(64), ForeignKey("dim_snapshots.snapshot_id"), nullable=False, index=True)
    technology = Column(String(100), nullable=False, index=True)
    rule_name = Column(String(500), nullable=False)
    nb_violations = Column(Integer, default=0)
    critical_contributions = Column(Integer, default=0)

    # Relationships
    snapshot = relationship("DimSnapshot", back_populates="violations")

    __table_args__ = (
        Index('idx_violations_snapshot_tech', 'snapshot_id', 'technology'),
    )

    def __repr__(self):
        return f"<AppViolationsMeasure(snapshot='{self.snapshot_id}', technology='{self.technology}', violations={self.nb_violations})>"
