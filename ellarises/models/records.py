"""Auxiliary person-linked records.

These tables belong to the wider site (program surveys, participant
milestones, donations). The booking core never writes them.
"""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Numeric, ForeignKey

from .base import Base

class Survey(Base):
    __tablename__ = 'surveys'

    id = Column('surveyid', Integer, primary_key=True, autoincrement=True)
    registration_id = Column('registrationid', Integer, ForeignKey('eventregistrations.registrationid'), nullable=False)
    satisfaction_score = Column('surveysatisfactionscore', Integer)
    usefulness_score = Column('surveyusefulnessscore', Integer)
    recommendation_score = Column('surveyrecommendationscore', Integer)
    comments = Column('surveycomments', Text)
    submitted_at = Column('surveysubmissiondate', DateTime)

class Milestone(Base):
    __tablename__ = 'milestones'

    id = Column('milestoneid', Integer, primary_key=True, autoincrement=True)
    person_id = Column('personid', Integer, ForeignKey('people.personid'), nullable=False)
    title = Column('milestonetitle', String(255), nullable=False)
    achieved_on = Column('milestonedate', Date)

class Donation(Base):
    __tablename__ = 'donations'

    id = Column('donationid', Integer, primary_key=True, autoincrement=True)
    person_id = Column('personid', Integer, ForeignKey('people.personid'))
    donor_name = Column('donorname', String(255))
    amount = Column('donationamount', Numeric(10, 2), nullable=False)
    donated_on = Column('donationdate', Date)
